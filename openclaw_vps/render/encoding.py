"""Base64 transport encoding for EC2 user-data payloads."""

import base64
import binascii


def encode_user_data(data: bytes | str) -> str:
    """
    Encode *data* as standard base64.

    ``str`` input is encoded as UTF-8 first. Any byte string round-trips
    through :func:`decode_user_data`, including ``b""``.
    """
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.b64encode(data).decode("ascii")


def decode_user_data(text: str | bytes) -> bytes:
    """
    Decode a payload produced by :func:`encode_user_data`.

    Raises:
        ValueError: If *text* is not valid standard base64
    """
    if isinstance(text, str):
        try:
            text = text.encode("ascii")
        except UnicodeEncodeError as e:
            raise ValueError("user-data payload is not base64") from e
    try:
        return base64.b64decode(text, validate=True)
    except binascii.Error as e:
        raise ValueError(f"user-data payload is not base64: {e}") from e
