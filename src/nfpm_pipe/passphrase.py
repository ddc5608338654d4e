"""Signing passphrase lookup from the environment."""

from __future__ import annotations

from typing import Mapping


def get_passphrase_from_env(env: Mapping[str, str], packager: str, nfpm_id: str) -> str:
    """Resolve the signing passphrase for one packager of one definition.

    ``NFPM_<ID>_<PACKAGER>_PASSPHRASE`` wins over ``NFPM_<ID>_PASSPHRASE``; the
    identifier is upper-cased first. A missing passphrase is not an error and
    yields an empty string.

    Args:
        env: Environment variables of the run
        packager: Packager tag, e.g. "DEB", "RPM" or "APK"
        nfpm_id: Package definition identifier

    Returns:
        The passphrase, or "" when neither variable is set
    """
    nfpm_id = nfpm_id.upper()
    packager_specific = env.get(f"NFPM_{nfpm_id}_{packager}_PASSPHRASE", "")
    if packager_specific:
        return packager_specific
    return env.get(f"NFPM_{nfpm_id}_PASSPHRASE", "")
