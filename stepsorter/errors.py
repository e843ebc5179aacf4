class StepSorterError(Exception):
    """Base class for everything StepSorter raises on purpose."""


class InvalidConfiguration(StepSorterError, ValueError):
    """Element count or delay outside the supported bounds."""


class UnknownAlgorithm(StepSorterError, KeyError):
    def __init__(self, name):
        super().__init__(name)
        self.name = name

    def __str__(self):
        return f"Unknown algorithm: {self.name!r}"
