"""Named model builders and the optimiser factories they share."""

from __future__ import annotations

import logging
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field

import numpy as np
from sklearn.utils import check_random_state

from ..config import Config, OptimizerConfig
from ..optimization import (
    ParallelSoftMaxOptimizer,
    ParallelTextGradientDescent,
    SoftMaxOptimizer,
    SparseTextGradientDescent,
    StoppingCriteria,
    never_stop,
    squared_error_below,
)
from ..types import ConvergenceReport, TrainingSet
from ..vocabulary import Vocabulary
from .base import TextModel
from .logistic import LogisticRegression
from .naive_bayes import MultinomialNaiveBayes
from .one_vs_one import OneAgainstOne
from .one_vs_rest import OneAgainstRest
from .softmax import SoftMaxRegression

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrainedModel:
    """Outcome of a builder: the model plus what is worth reporting about it."""

    model: TextModel
    vocabulary_size: int
    reports: tuple[ConvergenceReport, ...] = field(default_factory=tuple)


ModelBuilder = Callable[[TrainingSet, Config], TrainedModel]


@dataclass(frozen=True)
class RegistryEntry:
    name: str
    builder: ModelBuilder
    description: str = ""


class ModelRegistry:
    """Registry that maps model kinds to the builders that train them."""

    def __init__(self) -> None:
        self._entries: OrderedDict[str, RegistryEntry] = OrderedDict()

    def register(self, name: str, builder: ModelBuilder, description: str = "") -> None:
        if name in self._entries:
            raise ValueError(f"Model '{name}' is already registered.")
        self._entries[name] = RegistryEntry(name=name, builder=builder, description=description)

    def get(self, name: str) -> RegistryEntry:
        try:
            return self._entries[name]
        except KeyError as exc:
            raise KeyError(f"Model '{name}' is not registered.") from exc

    def names(self) -> list[str]:
        return list(self._entries)

    def entries(self) -> list[RegistryEntry]:
        return list(self._entries.values())

    def build(self, name: str, training_set: TrainingSet, config: Config) -> TrainedModel:
        entry = self.get(name)
        LOGGER.info(
            "Training '%s' on %d class(es), %d document(s)",
            name,
            len(training_set),
            sum(len(documents) for documents in training_set.values()),
        )
        return entry.builder(training_set, config)

    def __contains__(self, name: object) -> bool:
        return name in self._entries


def stopping_criteria(settings: OptimizerConfig) -> StoppingCriteria:
    if settings.tolerance is None:
        return never_stop
    return squared_error_below(settings.tolerance)


def text_optimizer(
    settings: OptimizerConfig,
    random_state: int | np.random.RandomState | None = None,
) -> SparseTextGradientDescent | ParallelTextGradientDescent:
    """Binary optimiser described by ``settings``; Hogwild when ``parallel`` is set."""

    if settings.parallel:
        if settings.batch_size is not None:
            LOGGER.warning("batch_size is ignored by the parallel optimiser")
        return ParallelTextGradientDescent(
            settings.learning_rate,
            settings.epochs,
            stopping_criteria(settings),
            l2_lambda=settings.l2_lambda,
            workers=settings.workers,
            verbose=settings.verbose,
            random_state=random_state,
        )
    return SparseTextGradientDescent(
        settings.learning_rate,
        settings.epochs,
        stopping_criteria(settings),
        l2_lambda=settings.l2_lambda,
        batch_size=settings.batch_size,
        verbose=settings.verbose,
        random_state=random_state,
    )


def softmax_optimizer(
    settings: OptimizerConfig,
    random_state: int | np.random.RandomState | None = None,
) -> SoftMaxOptimizer | ParallelSoftMaxOptimizer:
    if settings.parallel:
        return ParallelSoftMaxOptimizer(
            settings.learning_rate,
            settings.epochs,
            stopping_criteria(settings),
            l2_lambda=settings.l2_lambda,
            workers=settings.workers,
            verbose=settings.verbose,
            random_state=random_state,
        )
    return SoftMaxOptimizer(
        settings.learning_rate,
        settings.epochs,
        stopping_criteria(settings),
        l2_lambda=settings.l2_lambda,
        verbose=settings.verbose,
        random_state=random_state,
    )


def default_registry() -> ModelRegistry:
    """Registry holding every text model the command line can train."""

    registry = ModelRegistry()
    registry.register("naive_bayes", _build_naive_bayes, "Multinomial Naive Bayes")
    registry.register("logistic", _build_logistic, "Binary logistic regression (labels 0 and 1)")
    registry.register("softmax", _build_softmax, "Softmax regression")
    registry.register("one_vs_rest", _build_one_vs_rest, "One logistic model per class")
    registry.register("one_vs_one", _build_one_vs_one, "One logistic model per class pair")
    return registry


def _build_naive_bayes(training_set: TrainingSet, config: Config) -> TrainedModel:
    model = MultinomialNaiveBayes(training_set, min_count=config.naive_bayes.min_count)
    return TrainedModel(model=model, vocabulary_size=model.unique_words)


def _build_logistic(training_set: TrainingSet, config: Config) -> TrainedModel:
    vocabulary, rng = _prepare(training_set, config)
    model = LogisticRegression.from_text(
        vocabulary,
        training_set,
        text_optimizer(config.optimizer, rng),
        random_state=rng,
    )
    return TrainedModel(model=model, vocabulary_size=len(vocabulary), reports=_reports(model))


def _build_softmax(training_set: TrainingSet, config: Config) -> TrainedModel:
    vocabulary, rng = _prepare(training_set, config)
    model = SoftMaxRegression.from_text(
        vocabulary,
        training_set,
        softmax_optimizer(config.optimizer, rng),
        random_state=rng,
    )
    return TrainedModel(model=model, vocabulary_size=len(vocabulary), reports=_reports(model))


def _build_one_vs_rest(training_set: TrainingSet, config: Config) -> TrainedModel:
    vocabulary, rng = _prepare(training_set, config)
    model = OneAgainstRest.from_text(
        vocabulary,
        training_set,
        text_optimizer(config.optimizer, rng),
        random_state=rng,
    )
    reports = tuple(
        report for predictor in model.predictors.values() for report in _reports(predictor)
    )
    return TrainedModel(model=model, vocabulary_size=len(vocabulary), reports=reports)


def _build_one_vs_one(training_set: TrainingSet, config: Config) -> TrainedModel:
    vocabulary, rng = _prepare(training_set, config)
    model = OneAgainstOne.from_text(
        vocabulary,
        training_set,
        text_optimizer(config.optimizer, rng),
        random_state=rng,
    )
    reports = tuple(
        report for predictor in model.predictors.values() for report in _reports(predictor)
    )
    return TrainedModel(model=model, vocabulary_size=len(vocabulary), reports=reports)


def _prepare(
    training_set: TrainingSet,
    config: Config,
) -> tuple[Vocabulary, np.random.RandomState]:
    vocabulary = Vocabulary.from_training_set(training_set)
    return vocabulary, check_random_state(config.optimizer.seed)


def _reports(model: LogisticRegression | SoftMaxRegression) -> tuple[ConvergenceReport, ...]:
    return (model.report,) if model.report is not None else ()


__all__ = [
    "ModelBuilder",
    "ModelRegistry",
    "RegistryEntry",
    "TrainedModel",
    "default_registry",
    "softmax_optimizer",
    "stopping_criteria",
    "text_optimizer",
]
