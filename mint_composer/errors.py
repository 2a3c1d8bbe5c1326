class MintComposerError(Exception):
    pass


# ── Local pre-flight ────────────────────────────────────────────────


class ValidationError(MintComposerError):
    pass


# ── Requires a prior read ───────────────────────────────────────────


class StateMismatchError(MintComposerError):
    pass


class MintNotFoundError(StateMismatchError):
    pass


class InvalidMintAccountError(StateMismatchError):
    pass


class AccountNotFoundError(StateMismatchError):
    pass


class TokenAccountMismatchError(StateMismatchError):
    pass


class WrongListModeError(StateMismatchError):
    pass


class AuthorityMismatchError(StateMismatchError):
    pass


# ── Operation not allowed in the current state ──────────────────────


class PreconditionError(MintComposerError):
    pass


class AlreadyPausedError(PreconditionError):
    pass


class NotPausedError(PreconditionError):
    pass


class GatingSetupError(PreconditionError):
    pass


# ── Network collaborator ────────────────────────────────────────────


class TransportError(MintComposerError):
    pass
