"""
Board Corpus Analysis

Cleans bulletin-board messages and turns them into vocabulary, tf-idf,
group correlation, topic model and sentiment tables.
"""

from .cleaning import MessageCleaner
from .config import AnalysisConfig
from .corpus import Corpus
from .correlation import pairwise_correlation
from .document import Document
from .errors import (
    BoardCorpusError,
    EmptyVocabularyError,
    InvalidPriorError,
    InvalidTopicCountError,
    LexiconFormatError,
)
from .frequency import FrequencyAggregator, to_sparse_matrix
from .persistence import PersistenceManager
from .pipeline import AnalysisPipeline, AnalysisResults, TopicRequest
from .reader import CorpusReader
from .resources import Lexicon, load_lexicon, load_stopwords
from .sentiment import SentimentScorer
from .tfidf import tf_idf, top_terms
from .tokenizer import Tokenizer
from .topic_model import TopicModel, TopicModelResult

__version__ = "1.0.0"
__all__ = [
    "AnalysisConfig",
    "AnalysisPipeline",
    "AnalysisResults",
    "BoardCorpusError",
    "Corpus",
    "CorpusReader",
    "Document",
    "EmptyVocabularyError",
    "FrequencyAggregator",
    "InvalidPriorError",
    "InvalidTopicCountError",
    "Lexicon",
    "LexiconFormatError",
    "MessageCleaner",
    "PersistenceManager",
    "SentimentScorer",
    "Tokenizer",
    "TopicModel",
    "TopicModelResult",
    "TopicRequest",
    "load_lexicon",
    "load_stopwords",
    "pairwise_correlation",
    "tf_idf",
    "to_sparse_matrix",
    "top_terms",
]
