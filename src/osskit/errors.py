# SPDX-License-Identifier: MIT
"""Error taxonomy for osskit.

Construction-time problems are reported as :class:`ArgumentInvalidError` or
:class:`ProviderInitError` before a storage handle is returned.  Operation
errors raised by vendor SDKs propagate unchanged; :class:`BackendError` only
covers SDKs that report failure through a response object.
"""

from __future__ import annotations


class OSSError(Exception):
    """Base class for every error raised by osskit itself.

    Args:
        detail: Optional free-text explanation.
        cause: Optional underlying exception.
    """

    default_message = "object storage error"

    def __init__(self, detail: str | None = None, cause: BaseException | None = None) -> None:
        self.detail = detail
        self.cause = cause
        super().__init__(self._format())
        if cause is not None:
            self.__cause__ = cause

    def _format(self) -> str:
        message = self.default_message
        if self.detail:
            message = f"{message}: {self.detail}"
        if self.cause is not None:
            message = f"{message} ({type(self.cause).__name__}: {self.cause})"
        return message

    def with_detail(self, detail: str) -> OSSError:
        """Return a new error of the same kind carrying *detail*."""
        return type(self)(detail=detail, cause=self.cause)

    def with_error(self, cause: BaseException) -> OSSError:
        """Return a new error of the same kind wrapping *cause*."""
        return type(self)(detail=self.detail, cause=cause)


class ArgumentInvalidError(OSSError):
    """The storage arguments are missing, malformed, or fail validation."""

    default_message = "invalid argument"


class ProviderInitError(OSSError):
    """The vendor client could not be created or its bucket probe failed."""

    default_message = "provider initialization failed"


class BackendError(OSSError):
    """A backend reported failure without raising an exception of its own.

    Args:
        detail: Free-text explanation.
        status: HTTP status reported by the backend, if any.
        code: Vendor error code, if any.
    """

    default_message = "backend request failed"

    def __init__(
        self,
        detail: str | None = None,
        cause: BaseException | None = None,
        *,
        status: int | None = None,
        code: str | None = None,
    ) -> None:
        self.status = status
        self.code = code
        super().__init__(detail=detail, cause=cause)

    def _format(self) -> str:
        message = super()._format()
        if self.status is not None:
            message = f"{message} [status={self.status}" + (f", code={self.code}]" if self.code else "]")
        return message

    def with_detail(self, detail: str) -> BackendError:
        return BackendError(detail=detail, cause=self.cause, status=self.status, code=self.code)

    def with_error(self, cause: BaseException) -> BackendError:
        return BackendError(detail=self.detail, cause=cause, status=self.status, code=self.code)
