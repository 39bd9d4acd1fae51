"""Cache key derivation for resolved backgrounds.

Keys identify a resolution by its semantic identity, not by the full option
set: the setting plus a prompt prefix when a prompt is present, otherwise the
managed-asset id or tag, otherwise the setting alone.
"""

from __future__ import annotations

from backdrop.core.scenes.models import ResolutionOptions

DEFAULT_PROMPT_PREFIX_LENGTH = 60


def derive_cache_key(
    setting: str,
    options: ResolutionOptions | None = None,
    *,
    prompt_prefix_length: int = DEFAULT_PROMPT_PREFIX_LENGTH,
) -> str:
    """Derive the cache key for a resolution request.

    Examples:
        >>> derive_cache_key("bathroom")
        'bathroom'
        >>> derive_cache_key("travel", ResolutionOptions(creative_prompt="Rainy Paris cafe"))
        'travel-prompt-Rainy Paris cafe'
        >>> derive_cache_key("gym", ResolutionOptions(managed_tag="scene-gym"))
        'scene-gym'
    """
    opts = options or ResolutionOptions()
    prompt = opts.prompt
    if prompt:
        return f"{setting}-prompt-{prompt[:prompt_prefix_length]}"
    if opts.managed_asset_id:
        return opts.managed_asset_id
    if opts.managed_tag:
        return opts.managed_tag
    return setting
