# -*- coding: utf-8 -*-
"""
Exceptions raised by the PromptPay payload codec and the QR renderer wrapper.
"""


class CodecError(ValueError):
    """Input could not be turned into (or read back from) a PromptPay payload."""


class InvalidPhoneNumber(CodecError):
    pass


class InvalidAmount(CodecError):
    pass


class InvalidPayload(CodecError):
    """Payload text is not a well-formed PromptPay payload or its CRC does not match."""


class EncodingCapacityExceeded(Exception):
    """Payload does not fit into the requested QR symbol."""
