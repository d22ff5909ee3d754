"""
Centralized message templates for the precalculation pipeline.

This module provides:
- Consistent failure banners for the batch command
- Templates for errors that are reported outside an exception

Usage:
    from dcprecalc.error_messages import format_error

    msg = format_error('PHASE_FAILED', phase_id=2, kind='collaborator', error='boom')
"""

from typing import Any, Dict, Optional


ERROR_MESSAGES: Dict[str, str] = {
    'PHASE_FAILED': (
        "Phase {phase_id} failed ({kind}).\n"
        "Error: {error}\n"
        "Remaining phases were not run. Results already written by earlier\n"
        "phases were kept."
    ),

    'DATASET_FAILED': (
        "Dataset acquisition failed ({kind}).\n"
        "Error: {error}\n"
        "No phase was run."
    ),

    'DATASET_URL_MISSING': (
        "Dataset not found in {path} and no download URL is configured.\n"
        "Set DATASET_DOWNLOAD_URL or dataset.url in the config file,\n"
        "or extract the archive manually."
    ),

    'ORCHESTRATOR_MISSING': (
        "No orchestrator configured for phase {phase_id}.\n"
        "Add it to the config file, for example:\n"
        "  orchestrators:\n"
        "    {phase_id}: mypackage.phase{phase_id}:Orchestrator"
    ),

    'AGGREGATION_GAP': (
        "Phase {phase_id}: {count} date(s) are missing metric values: {dates}\n"
        "The written document is incomplete for these dates."
    ),

    'INTERNAL_ERROR': (
        "An internal error occurred: {error}\n"
        "Run with --debug for the full stack trace."
    ),
}


def format_error(error_key: str, **kwargs) -> str:
    """
    Format an error message with the given parameters.

    Args:
        error_key: Key for the error message template.
        **kwargs: Parameters to substitute in the template.

    Returns:
        Formatted error message string.
    """
    template = ERROR_MESSAGES.get(error_key)
    if template is None:
        return f"Unknown error: {error_key}\nContext: {kwargs}"

    try:
        return template.format(**kwargs)
    except KeyError as e:
        return f"{template}\n(Missing format parameter: {e})"


class ErrorFormatter:
    """
    Helper class for formatting banners with consistent styling.
    """

    COLORS = {
        'reset': '\033[0m',
        'bold': '\033[1m',
        'red': '\033[91m',
        'green': '\033[92m',
    }

    RULE = "=" * 40

    def __init__(self, use_colors: bool = True):
        self.use_colors = use_colors

    def _color(self, text: str, color: str) -> str:
        if self.use_colors and color in self.COLORS:
            return f"{self.COLORS[color]}{text}{self.COLORS['reset']}"
        return text

    def format_details(self, details: Dict[str, Any]) -> str:
        lines = []
        for key, value in details.items():
            key_styled = self._color(f"{key}:", 'bold')
            lines.append(f"  {key_styled} {value}")
        return "\n".join(lines)

    def format_banner(self, title: str, details: Optional[Dict[str, Any]] = None,
                      success: bool = True) -> str:
        """
        Format a framed banner such as the per-phase success summary.

        Args:
            title: Banner title.
            details: Optional key/value lines shown under the title.
            success: Green when True, red otherwise.

        Returns:
            Multi-line banner string.
        """
        color = 'green' if success else 'red'
        parts = [self.RULE, self._color(title, color)]
        if details:
            parts.append(self.format_details(details))
        parts.append(self.RULE)
        return "\n".join(parts)
