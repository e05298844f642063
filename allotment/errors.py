"""
Exceptions raised by the allotment engine and the registration desk.

Ineligibility and "no portfolio available" are ordinary results, not errors;
the classes here cover broken invariants, illegal transitions and invalid input
at the registration boundary.
"""


class AllotmentError(Exception):
    """Base class for all allotment errors."""


class CatalogError(AllotmentError):
    """The tier catalog is malformed (e.g. a portfolio listed under two tiers)."""


class UnknownPortfolioError(AllotmentError, KeyError):
    """A portfolio key is not part of the inventory."""


class UnknownDelegateError(AllotmentError, KeyError):
    """No registration exists for the given delegate id."""


class ClaimConflictError(AllotmentError):
    """
    The chosen portfolio was claimed by someone else before we could claim it.

    Retryable: run the allocation again against refreshed capacity state.
    """

    retryable = True


class AlreadyAllocatedError(AllotmentError):
    """The delegate already holds a portfolio."""


class NotAllottedError(AllotmentError):
    """The delegate does not hold a portfolio."""


class InvalidTransitionError(AllotmentError):
    """The requested status transition is not part of the allocation lifecycle."""


class CapacityExceededError(AllotmentError):
    """The system-wide admission cap has been reached."""


class DuplicateRegistrationError(AllotmentError):
    """A registration with the same e-mail address already exists."""


class InvalidPreferenceError(AllotmentError, ValueError):
    """Preference list is empty, misses rank 1, or repeats a rank."""


class InvalidExperienceBandError(AllotmentError, ValueError):
    """The experience band label is not one of the known bands."""


class InvalidPaymentCodeError(AllotmentError):
    """The payment code does not match the one issued at registration."""
