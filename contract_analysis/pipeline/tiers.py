"""
Tier policy: subscription tier to pipeline knobs and upload limits.

Profiles are plain values handed to each stage; nothing here holds
mutable state.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional, Union

from contract_analysis.config.settings import load_plan_limits
from contract_analysis.exceptions import UnknownTierError, UploadRejectedError
from contract_analysis.models.schemas import Depth, PlanLimits, Tier, TierProfile

logger = logging.getLogger(__name__)


# =============================================================================
# Tier Profiles
# =============================================================================

_DEEP_PROFILE = TierProfile(
    max_input_chars=32000,
    summary_depth=Depth.DEEP,
    risk_detail=Depth.DEEP,
    clause_detail=Depth.DEEP,
)

TIER_PROFILES: dict[Tier, TierProfile] = {
    Tier.FREE: TierProfile(
        max_input_chars=8000,
        summary_depth=Depth.BASIC,
        risk_detail=Depth.BASIC,
        clause_detail=Depth.BASIC,
    ),
    Tier.PRO: TierProfile(
        max_input_chars=16000,
        summary_depth=Depth.STANDARD,
        risk_detail=Depth.STANDARD,
        clause_detail=Depth.STANDARD,
    ),
    Tier.BUSINESS: _DEEP_PROFILE,
    Tier.ENTERPRISE: _DEEP_PROFILE,
}


def parse_tier(value: Union[Tier, str, None], strict: bool = False) -> Tier:
    """
    Parse a tier name.

    Unknown values fall back to the free tier unless strict is set.

    Raises:
        UnknownTierError: If strict and the value is not a known tier
    """
    if isinstance(value, Tier):
        return value

    try:
        return Tier(str(value).strip().lower())
    except ValueError:
        if strict:
            raise UnknownTierError(value) from None
        logger.warning("Unknown tier %r, falling back to the free profile", value)
        return Tier.FREE


def resolve_tier_profile(
    tier: Union[Tier, str, None],
    strict: bool = False
) -> TierProfile:
    """
    Map a subscription tier to its profile.

    Args:
        tier: Tier enum or name
        strict: Raise on unknown tiers instead of downgrading to free

    Returns:
        TierProfile for the tier
    """
    return TIER_PROFILES[parse_tier(tier, strict=strict)]


def truncate_text(text: str, profile: TierProfile) -> str:
    """Hard prefix cut to the profile's input budget."""
    return text[:profile.max_input_chars]


# =============================================================================
# Plan Limits
# =============================================================================

@lru_cache(maxsize=8)
def _plan_limits_table(path: Optional[Path] = None) -> dict[Tier, PlanLimits]:
    raw = load_plan_limits(path)
    return {Tier(name): PlanLimits(**limits) for name, limits in raw.items()}


def get_plan_limits(
    tier: Union[Tier, str, None],
    path: Optional[Path] = None
) -> PlanLimits:
    """
    Usage limits for a tier, read from the plan limits file.

    Args:
        tier: Tier enum or name (unknown names resolve to free)
        path: Optional alternative limits file
    """
    return _plan_limits_table(path)[parse_tier(tier)]


def check_upload(
    tier: Union[Tier, str, None],
    file_type: str,
    size_bytes: int,
    path: Optional[Path] = None
) -> None:
    """
    Gate an upload against the tier's file size and type limits.

    Raises:
        UploadRejectedError: If the upload exceeds the plan
    """
    limits = get_plan_limits(tier, path)
    kind = file_type.strip().lower().lstrip(".")

    if kind not in limits.upload_types:
        raise UploadRejectedError(
            f"File type '{kind}' is not available on the {parse_tier(tier).value} plan "
            f"(allowed: {', '.join(limits.upload_types)})"
        )

    if limits.max_file_size_mb != -1 and size_bytes > limits.max_file_size_mb * 1024 * 1024:
        raise UploadRejectedError(
            f"File is {size_bytes / (1024 * 1024):.1f}MB; the "
            f"{parse_tier(tier).value} plan allows {limits.max_file_size_mb}MB"
        )


def can_export_format(tier: Union[Tier, str, None], fmt: str) -> bool:
    """Check whether the tier may export a report in the given format."""
    return fmt.lower() in get_plan_limits(tier).export_formats
