"""Built-in extensions.

Each module exposes a ``create_*_extension`` factory. BuiltinExtensions
contributes the default instances to a registry through pluggy.
"""

from glosspipe.contracts.extension import Extension
from glosspipe.plugins.extensions.difficulty import create_difficulty_extension
from glosspipe.plugins.extensions.frequency import create_frequency_extension
from glosspipe.plugins.extensions.providers import (
    DifficultyProvider,
    FrequencyProvider,
    MappingDifficultyProvider,
    MappingFrequencyProvider,
)
from glosspipe.plugins.extensions.reading_score import create_reading_score_extension
from glosspipe.plugins.extensions.word_length import create_word_length_extension
from glosspipe.plugins.hookspecs import hookimpl


class BuiltinExtensions:
    """pluggy plugin contributing the built-in extensions with default settings.

    The frequency and difficulty defaults have no provider; give them data
    through the ``levels`` option or register your own instances.
    """

    name = "glosspipe-builtins"

    @hookimpl
    def glosspipe_get_extensions(self) -> list[Extension]:
        return [
            create_word_length_extension(),
            create_frequency_extension(),
            create_difficulty_extension(),
            create_reading_score_extension(),
        ]


__all__ = [
    "BuiltinExtensions",
    "DifficultyProvider",
    "FrequencyProvider",
    "MappingDifficultyProvider",
    "MappingFrequencyProvider",
    "create_difficulty_extension",
    "create_frequency_extension",
    "create_reading_score_extension",
    "create_word_length_extension",
]
