from __future__ import annotations


class SizeError(ValueError):
    """Base class for every size parsing failure."""

    def __init__(self, message: str, value: str) -> None:
        super().__init__(message)
        self.value = value


class EmptyInputError(SizeError):
    def __init__(self, value: str) -> None:
        super().__init__("empty size string", value)


class InvalidFormatError(SizeError):
    def __init__(self, value: str) -> None:
        super().__init__(f"invalid size format: {value}", value)


class InvalidNumberError(SizeError):
    def __init__(self, value: str, number: str) -> None:
        super().__init__(f"invalid number: {number}", value)
        self.number = number


class NegativeSizeError(SizeError):
    def __init__(self, value: str) -> None:
        super().__init__(f"size cannot be negative: {value}", value)


class UnknownUnitError(SizeError):
    def __init__(self, value: str, unit: str) -> None:
        super().__init__(f"unknown unit: {unit}", value)
        self.unit = unit


class SizeOverflowError(SizeError):
    def __init__(self, value: str) -> None:
        super().__init__(f"size too large: {value}", value)
