class DomainError(Exception):
    """Base class for all domain-level errors."""

    pass


class InvalidVerificationRequest(DomainError):
    """A required field (code or machine id) is missing or blank."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UnknownCode(DomainError):
    """No verification code record matches the submitted code."""

    def __init__(self, *, single_use: bool = False) -> None:
        super().__init__()
        # under single-use codes, unknown and used codes must look alike
        self.single_use = single_use


class CodeAlreadyUsed(DomainError):
    """The code has already been activated (single-use policy, or a lost race)."""

    pass


class CodeBoundToAnotherMachine(DomainError):
    """The code was activated by a different machine."""

    pass


class CodeStoreError(Exception):
    """The code store failed to answer a query or apply an update."""

    pass


class CodeStoreMisconfigured(CodeStoreError):
    """The code store credentials or location are not configured."""

    pass
