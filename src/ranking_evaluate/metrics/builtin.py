"""Built-in ranking metrics: precision, recall, F1, reciprocal rank, AP, nDCG."""

from typing import List, Optional

import numpy as np

from .metric import Metric, is_relevant


class Precision(Metric):
    """Relevant retrieved / retrieved, within the cutoff."""
    base_name = "P"

    def score(self, grades: List[Optional[int]]) -> float:
        if not grades:
            return 0.0
        return sum(1 for g in grades if is_relevant(g)) / len(grades)


class Recall(Metric):
    """Relevant retrieved within the cutoff / all judged relevant."""
    base_name = "R"

    def score(self, grades: List[Optional[int]]) -> float:
        total_relevant = self.relevant_count
        if total_relevant == 0:
            return 0.0
        return sum(1 for g in grades if is_relevant(g)) / total_relevant


class F1(Metric):
    base_name = "F1"

    def score(self, grades: List[Optional[int]]) -> float:
        if not grades or self.relevant_count == 0:
            return 0.0
        hits = sum(1 for g in grades if is_relevant(g))
        precision = hits / len(grades)
        recall = hits / self.relevant_count
        if precision + recall == 0:
            return 0.0
        return 2 * precision * recall / (precision + recall)


class ReciprocalRank(Metric):
    base_name = "RR"

    def score(self, grades: List[Optional[int]]) -> float:
        for rank, grade in enumerate(grades, 1):
            if is_relevant(grade):
                return 1.0 / rank
        return 0.0


class AveragePrecision(Metric):
    """Sum of precision at each relevant rank, over the number of judged relevant docs."""
    base_name = "AP"

    def score(self, grades: List[Optional[int]]) -> float:
        total_relevant = self.relevant_count
        if total_relevant == 0:
            return 0.0
        found = 0
        precision_sum = 0.0
        for rank, grade in enumerate(grades, 1):
            if is_relevant(grade):
                found += 1
                precision_sum += found / rank
        return precision_sum / total_relevant


class NDCG(Metric):
    """Graded nDCG: gain 2^grade - 1, discount log2(rank + 1)."""
    base_name = "NDCG"

    def score(self, grades: List[Optional[int]]) -> float:
        ideal_grades = sorted((g for g in self.relevant_documents.values() if g > 0), reverse=True)
        if self.k is not None:
            ideal_grades = ideal_grades[: self.k]
        idcg = _dcg(ideal_grades)
        if idcg == 0:
            return 0.0
        return _dcg([g if g is not None else 0 for g in grades]) / idcg


def _dcg(grades: List[int]) -> float:
    if not grades:
        return 0.0
    gains = np.power(2.0, np.asarray(grades, dtype=float)) - 1.0
    discounts = np.log2(np.arange(2, len(grades) + 2, dtype=float))
    return float(np.sum(gains / discounts))
