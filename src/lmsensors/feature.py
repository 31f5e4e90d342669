"""
Feature Wrapper

A Feature is a measurement group on a chip, e.g. "temp1". It keeps both the
config and its owning Chip alive: the chip pointer is needed for label
lookups and subfeature enumeration.
"""

from typing import TYPE_CHECKING, Any, Callable, Iterator

from .cache import SUBFEATURES
from .enumeration import NativeSequence, walk
from .subfeature import Subfeature

if TYPE_CHECKING:
    from .chip import Chip
    from .config import SensorsConfig


class Feature:
    """A logical measurement group on a chip."""

    def __init__(self, config: "SensorsConfig", chip: "Chip", ref: Any):
        self._config = config
        self._chip = chip
        self._ref = ref

    @property
    def config(self) -> "SensorsConfig":
        return self._config

    @property
    def chip(self) -> "Chip":
        return self._chip

    @property
    def ref(self) -> Any:
        self._config.require_native()
        return self._ref

    @property
    def name(self) -> str:
        return self._config.backend.feature_name(self.ref)

    @property
    def number(self) -> int:
        return self._config.backend.feature_number(self.ref)

    @property
    def type(self) -> int:
        return self._config.backend.feature_type(self.ref)

    @property
    def label(self) -> str:
        """Label from the config file, falling back to the feature name."""
        config = self._config
        return config.backend.get_label(config.native, self._chip.ref, self.ref)

    def subfeatures(self) -> NativeSequence[Subfeature]:
        """Return a restartable lazy sequence of this feature's subfeatures."""
        return NativeSequence(self._iter_subfeatures)

    def each_subfeature(self, action: Callable[[Subfeature], Any]) -> "Feature":
        """Apply action to each subfeature; returning False stops early."""
        self.subfeatures().each(action)
        return self

    def _iter_subfeatures(self) -> Iterator[Subfeature]:
        config = self._config
        backend = config.backend
        config.require_native()
        return walk(
            backend,
            self,
            SUBFEATURES,
            lambda cursor: backend.get_all_subfeatures(
                config.require_native(), self._chip.ref, self._ref, cursor
            ),
            lambda ref: Subfeature(config, self, ref),
        )

    def __iter__(self) -> Iterator[Subfeature]:
        return self._iter_subfeatures()

    def __repr__(self) -> str:
        if not self._config.is_initialized:
            return "<Feature (config released)>"
        return f"<Feature {self.name} of {self._chip.display_name}>"
