"""Gradient descent optimisers for linear and softmax classifiers."""

from .concurrent import AtomicDoubleArray, DoubleAdder
from .dense import GradientDescent
from .parallel_text import ParallelTextGradientDescent
from .perceptron import DeltaRule, DeltaRuleGradientDescent, Perceptron
from .softmax import ParallelSoftMaxOptimizer, SoftMaxOptimizer, SoftMaxVectorOptimizer
from .sparse_text import SparseTextGradientDescent
from .stopping import StoppingCriteria, never_stop, squared_error_below

__all__ = [
    "AtomicDoubleArray",
    "DeltaRule",
    "DeltaRuleGradientDescent",
    "DoubleAdder",
    "GradientDescent",
    "ParallelSoftMaxOptimizer",
    "ParallelTextGradientDescent",
    "Perceptron",
    "SoftMaxOptimizer",
    "SoftMaxVectorOptimizer",
    "SparseTextGradientDescent",
    "StoppingCriteria",
    "never_stop",
    "squared_error_below",
]
