"""
Parameter Manager for paramtweak.

Binds parameter descriptors to a live TweakContext and offers the
name-based entry points a control channel needs:
- Query and set by name
- Applying defaults (and configured overrides)
- Export/import of every parameter's text form
"""

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from paramtweak.config.settings import Settings, get_settings
from paramtweak.params.buffer import OutputBuffer
from paramtweak.params.context import ParamBlock, TweakContext
from paramtweak.params.models import ParamSpec
from paramtweak.params.table import DEFAULT_PARAMS
from paramtweak.utils.logger_config import setup_logging

logger = logging.getLogger(__name__)


class ParameterManager:
    """
    Name-based access to tweak operations.

    Each call runs one tweak operation against the shared context and
    returns its output text. Calls are expected to come from a single
    control path; the manager does no locking of its own.
    """

    def __init__(
        self,
        specs: Optional[Iterable[ParamSpec]] = None,
        context: Optional[TweakContext] = None,
        settings: Optional[Settings] = None
    ):
        """
        Initialize ParameterManager.

        Args:
            specs: Parameter descriptors (default table if None)
            context: Live state to operate on (fresh context if None)
            settings: Settings supplying the listen service and overrides
        """
        self._settings = settings or get_settings()
        self._specs: Dict[str, ParamSpec] = {}
        self.context = context or TweakContext(
            params=ParamBlock(),
            listen_service=self._settings.listen_service,
        )

        for spec in DEFAULT_PARAMS if specs is None else specs:
            self.register(spec)

    def register(self, spec: ParamSpec) -> None:
        """Add a descriptor and create its live slot."""
        if spec.func is None:
            raise ValueError(f"Parameter {spec.name} has no tweak function")
        self._specs[spec.name] = spec
        self.context.params.add(spec)

    def get_spec(self, name: str) -> ParamSpec:
        """Get a descriptor by name; raises KeyError if unknown."""
        return self._specs[name]

    def list_params(self) -> List[str]:
        """Get all parameter names in sorted order."""
        return sorted(self._specs)

    # =========================================================================
    # Query / Set
    # =========================================================================

    def tweak(self, name: str, arg: Optional[str] = None) -> Tuple[bool, str]:
        """
        Run the tweak operation for a parameter.

        Args:
            name: Parameter name
            arg: Text to set, or None to query

        Returns:
            Tuple of (success, output text)
        """
        spec = self._specs.get(name)
        if spec is None:
            return False, f"Unknown parameter: {name}"

        vsb = OutputBuffer()
        ok = spec.func(self.context, vsb, spec, arg)
        return ok, vsb.getvalue()

    def query(self, name: str) -> str:
        """Get the text form of a parameter's current value."""
        spec = self.get_spec(name)
        vsb = OutputBuffer()
        spec.func(self.context, vsb, spec, None)
        return vsb.getvalue()

    def set(self, name: str, value: str) -> Tuple[bool, str]:
        """
        Set a parameter from text.

        Returns:
            Tuple of (success, diagnostic). The diagnostic is empty on success.
        """
        ok, text = self.tweak(name, value)
        if ok:
            logger.info(f"Parameter {name} set to {value!r}")
        else:
            logger.warning(f"Parameter {name} rejected {value!r}: {text.strip()}")
        return ok, text

    # =========================================================================
    # Defaults
    # =========================================================================

    def reset_to_defaults(self, name: Optional[str] = None) -> Dict[str, bool]:
        """
        Apply default values through each parameter's own tweak operation.

        Args:
            name: Single parameter to reset (all if None)

        Returns:
            Dictionary mapping parameter names to success
        """
        names = [name] if name else list(self._specs)
        results = {}

        for param_name in names:
            spec = self.get_spec(param_name)
            if spec.default is None:
                continue
            results[param_name] = self.set(param_name, spec.default)[0]

        return results

    def apply_overrides(self, overrides: Optional[Dict[str, str]] = None) -> Dict[str, bool]:
        """
        Apply configured overrides on top of the current values.

        Args:
            overrides: name -> text (settings' overrides if None)

        Returns:
            Dictionary mapping parameter names to success
        """
        if overrides is None:
            overrides = self._settings.param_overrides
        return {name: self.set(name, value)[0] for name, value in overrides.items()}

    # =========================================================================
    # Export/Import
    # =========================================================================

    def export_params(self) -> Dict[str, str]:
        """
        Export the text form of every parameter.

        Returns:
            Dictionary mapping parameter names to query output
        """
        return {name: self.query(name) for name in self.list_params()}

    def import_params(self, params: Dict[str, str]) -> Dict[str, bool]:
        """
        Set parameters from exported text forms.

        Unknown names are logged and reported as failures; the rest are
        still applied.

        Returns:
            Dictionary mapping parameter names to success
        """
        results = {}

        for name, value in params.items():
            if name not in self._specs:
                logger.warning(f"Unknown parameter: {name}")
                results[name] = False
                continue
            results[name] = self.set(name, value)[0]

        return results


# =============================================================================
# Global Instance
# =============================================================================

_parameter_manager: Optional[ParameterManager] = None


def get_parameter_manager() -> ParameterManager:
    """Get or create global ParameterManager instance."""
    global _parameter_manager
    if _parameter_manager is None:
        _parameter_manager = ParameterManager()
    return _parameter_manager


def initialize_parameter_manager(
    settings: Optional[Settings] = None,
    context: Optional[TweakContext] = None
) -> ParameterManager:
    """
    Initialize global ParameterManager with defaults and overrides applied.

    Args:
        settings: Settings to use (global settings if None)
        context: Live state to operate on (fresh context if None)

    Returns:
        Initialized ParameterManager
    """
    global _parameter_manager
    settings = settings or get_settings()
    setup_logging(settings.log_level, settings.log_format, settings.log_file)

    _parameter_manager = ParameterManager(context=context, settings=settings)
    _parameter_manager.reset_to_defaults()
    _parameter_manager.apply_overrides()
    return _parameter_manager
