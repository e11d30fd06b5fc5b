"""Download link derivation for catalog media tokens.

The catalog never returns a playable URL directly. Each song carries an
``encrypted_media_url``: a base64 DES-ECB ciphertext of a media URL whose file
name embeds a bitrate marker (``..._96.mp4``). Decrypting it once and swapping
the marker yields one URL per bitrate the catalog serves.
"""
from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass
from typing import Final, Iterable

from Crypto.Cipher import DES
from Crypto.Util.Padding import unpad

from media_relay.core.config import Settings
from media_relay.domain.errors import DecodeError, DecryptError
from media_relay.domain.links import BITRATE_TIERS, DownloadLink


@dataclass(frozen=True)
class LinkCipher:
    """Protocol constants of the catalog's media URL encryption.

    Notes
    -----
    - ECB mode takes no IV, so none is configured.
    - ``tier_format`` renders a tier into the text that replaces ``placeholder``.
    """

    key: bytes = b"38346591"
    placeholder: str = "_96"
    tier_format: str = "_{tier}"

    def __post_init__(self) -> None:
        if len(self.key) != DES.key_size:
            raise ValueError(f"DES key must be exactly {DES.key_size} bytes")
        if not self.placeholder:
            raise ValueError("Placeholder must not be empty")

    @classmethod
    def from_settings(cls, settings: Settings) -> "LinkCipher":
        return cls(key=settings.link_cipher_key.encode("ascii"), placeholder=settings.link_placeholder)

    def render(self, tier: int) -> str:
        return self.tier_format.format(tier=tier)


DEFAULT_CIPHER: Final[LinkCipher] = LinkCipher()


class LinkDeriver:
    """Turn encrypted media tokens into per-bitrate download links.

    Instances hold only the immutable cipher configuration and may be shared
    freely between concurrent callers.
    """

    def __init__(self, cipher: LinkCipher = DEFAULT_CIPHER) -> None:
        self.cipher: LinkCipher = cipher

    def decrypt(self, token: str) -> str:
        """Recover the URL template hidden in ``token``.

        Raises
        ------
        DecodeError
            If ``token`` is empty, not base64, or not a whole number of cipher blocks.
        DecryptError
            If the plaintext padding is invalid or the plaintext is not UTF-8.
        """

        try:
            raw: bytes = base64.b64decode(token, validate=True)
        except (binascii.Error, ValueError) as ex:
            raise DecodeError("Media token is not valid base64") from ex
        if not raw or len(raw) % DES.block_size:
            raise DecodeError("Media token is not aligned to the cipher block size")

        plain: bytes = DES.new(self.cipher.key, DES.MODE_ECB).decrypt(raw)
        try:
            return unpad(plain, DES.block_size).decode("utf-8")
        except ValueError as ex:
            raise DecryptError("Media token could not be decrypted") from ex

    def derive(self, token: str, tiers: Iterable[int] = BITRATE_TIERS) -> list[DownloadLink]:
        """Derive one download link per tier, in the order given.

        Parameters
        ----------
        token: str
            The catalog's ``encrypted_media_url``.
        tiers: Iterable[int]
            Bitrates in kbps. Duplicates and order are kept as given.

        Returns
        -------
        list[DownloadLink]
            Every occurrence of the placeholder replaced by the rendered tier.
            Empty when ``tiers`` is empty; the token is still validated.
        """

        template: str = self.decrypt(token)
        return [
            DownloadLink.for_tier(tier, template.replace(self.cipher.placeholder, self.cipher.render(tier)))
            for tier in tiers
        ]


def derive_links(
    token: str,
    tiers: Iterable[int] = BITRATE_TIERS,
    cipher: LinkCipher = DEFAULT_CIPHER,
) -> list[DownloadLink]:
    """Module-level shortcut for ``LinkDeriver(cipher).derive(token, tiers)``."""

    return LinkDeriver(cipher).derive(token, tiers)
