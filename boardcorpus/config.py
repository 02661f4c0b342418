"""
Configuration defaults for the board corpus analysis pipeline.

Module-level constants hold the defaults; AnalysisConfig bundles them
so a whole run can be described (and loaded from JSON) in one place.
"""

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, FrozenSet, Mapping, Optional, Tuple, Union

# ===========================
# Corpus
# ===========================
BINARY_MESSAGE_DENYLIST: FrozenSet[str] = frozenset({'9704', '9985'})
"""Message ids whose bodies are uuencoded binaries rather than text"""

READER_ENCODING = 'latin-1'
"""Encoding used for raw message files"""

# ===========================
# Frequency aggregation
# ===========================
DEFAULT_MIN_WORD_TOTAL = 50
"""Words with fewer corpus occurrences are dropped before topic modeling"""

DEFAULT_N_JOBS = 1
"""Worker processes for per-document counting (1 = sequential)"""

# ===========================
# Topic model
# ===========================
DEFAULT_NUM_TOPICS = 4
DEFAULT_RANDOM_SEED = 2016
DEFAULT_ETA = 0.1
"""Symmetric Dirichlet prior on topic-word distributions"""

DEFAULT_MAX_ITER = 200
"""Hard cap on inference sweeps"""

DEFAULT_TOL = 1e-4
"""Relative log-likelihood change below which Gibbs sampling has converged"""

DEFAULT_PERP_TOL = 0.1
"""Perplexity change below which variational EM has converged"""

DEFAULT_EVALUATE_EVERY = 10

TOPIC_MODEL_METHODS: Tuple[str, ...] = ('gibbs', 'variational')
DEFAULT_TOPIC_MODEL_METHOD = 'gibbs'
"""Collapsed Gibbs sampling; 'variational' uses scikit-learn batch EM"""

# ===========================
# Sentiment
# ===========================
DEFAULT_MIN_MATCHED_WORDS = 5
"""Messages with fewer lexicon matches are left out of message rankings"""

NEGATION_WORDS: Tuple[str, ...] = (
    'not', 'without', 'no', 'never', "can't", "don't", "won't",
)


@dataclass(frozen=True)
class AnalysisConfig:
    """Settings for one analysis run."""

    denylist: FrozenSet[str] = BINARY_MESSAGE_DENYLIST
    min_word_total: int = DEFAULT_MIN_WORD_TOTAL
    n_jobs: int = DEFAULT_N_JOBS
    num_topics: int = DEFAULT_NUM_TOPICS
    random_seed: int = DEFAULT_RANDOM_SEED
    eta: float = DEFAULT_ETA
    alpha: Optional[float] = None
    max_iter: int = DEFAULT_MAX_ITER
    tol: float = DEFAULT_TOL
    evaluate_every: int = DEFAULT_EVALUATE_EVERY
    max_seconds: Optional[float] = None
    topic_model_method: str = DEFAULT_TOPIC_MODEL_METHOD
    min_matched_words: int = DEFAULT_MIN_MATCHED_WORDS
    negation_words: Tuple[str, ...] = field(default=NEGATION_WORDS)

    def __post_init__(self):
        if self.min_word_total < 0:
            raise ValueError(f"min_word_total must be >= 0, got {self.min_word_total}")
        if self.n_jobs < 1:
            raise ValueError(f"n_jobs must be >= 1, got {self.n_jobs}")
        if self.min_matched_words < 0:
            raise ValueError(
                f"min_matched_words must be >= 0, got {self.min_matched_words}")
        if self.topic_model_method not in TOPIC_MODEL_METHODS:
            raise ValueError(f"Unknown topic model method: {self.topic_model_method}")
        # JSON gives lists; keep the dataclass hashable and immutable
        object.__setattr__(self, 'denylist', frozenset(self.denylist))
        object.__setattr__(self, 'negation_words', tuple(self.negation_words))

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> 'AnalysisConfig':
        """
        Build a config from a mapping, rejecting unknown keys.

        Args:
            values: Field names mapped to values

        Returns:
            AnalysisConfig with the given overrides applied
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(values) - known)
        if unknown:
            raise ValueError(f"Unknown config keys: {', '.join(unknown)}")
        return cls(**dict(values))

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'AnalysisConfig':
        """Load a config from a JSON object file."""
        with open(path, 'r', encoding='utf-8') as f:
            values = json.load(f)
        if not isinstance(values, dict):
            raise ValueError(f"Config file {path} must contain a JSON object")
        return cls.from_mapping(values)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the config to a JSON-serializable dictionary."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data['denylist'] = sorted(self.denylist)
        data['negation_words'] = list(self.negation_words)
        return data
