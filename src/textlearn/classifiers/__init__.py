"""Text and vector classifiers built on the optimisers."""

from .base import Model, ProbabilisticTextModel, TextModel
from .logistic import LogisticRegression
from .naive_bayes import ClassDistribution, MultinomialNaiveBayes
from .one_vs_one import OneAgainstOne
from .one_vs_rest import OneAgainstRest
from .registry import ModelRegistry, TrainedModel, default_registry
from .softmax import SoftMaxRegression

__all__ = [
    "ClassDistribution",
    "LogisticRegression",
    "Model",
    "ModelRegistry",
    "MultinomialNaiveBayes",
    "OneAgainstOne",
    "OneAgainstRest",
    "ProbabilisticTextModel",
    "SoftMaxRegression",
    "TextModel",
    "TrainedModel",
    "default_registry",
]
