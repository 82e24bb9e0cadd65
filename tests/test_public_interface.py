import konverge


def test_all_exported_names_exist():
    missing = [name for name in konverge.__all__ if not hasattr(konverge, name)]
    assert not missing


def test_error_taxonomy():
    assert issubclass(konverge.AppNotReadyError, konverge.TemporaryError)
    assert issubclass(konverge.AppNotTerminatedError, konverge.TemporaryError)
    assert issubclass(konverge.PVCNotReadyError, konverge.TemporaryError)
    assert issubclass(konverge.ConvergenceTimeoutError, konverge.ConvergenceError)
    assert issubclass(konverge.ConvergenceStoppedError, konverge.ConvergenceError)
    assert not issubclass(konverge.PermanentError, konverge.TemporaryError)
    assert not issubclass(konverge.ConvergenceError, konverge.TemporaryError)
