from __future__ import annotations


class ShoppingAssistantError(Exception):
    """Base error for failures surfaced to the API caller."""

    status_code = 500


class UpstreamLLMError(ShoppingAssistantError):
    """The completion call failed, so no search terms could be extracted."""

    status_code = 500


class InvalidRequestError(ShoppingAssistantError):
    """The inbound request cannot be processed (e.g. blank message)."""

    status_code = 400
