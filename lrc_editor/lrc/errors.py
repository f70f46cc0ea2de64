class LrcError(ValueError):
    pass


class LrcImportError(LrcError):
    pass
