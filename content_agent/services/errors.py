"""Errors raised by provider adapters and session stores."""


class ProviderError(Exception):
    """A search or generation provider call failed."""


class StoreError(Exception):
    """The session store could not complete an operation."""


class ApprovalNotFoundError(StoreError):
    pass


class ApprovalAlreadyResolvedError(StoreError):
    pass
