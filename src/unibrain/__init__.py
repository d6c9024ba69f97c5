"""UniBrain study engine: adaptive Learn Mode scheduling and Write Mode grading."""

from unibrain.consts import VERSION

__version__ = VERSION
