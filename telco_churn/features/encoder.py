"""
Categorical Encoder Module
==========================

Turns a cleaned customer table into a numeric feature matrix.

Category-to-column assignment is deterministic: categories are ordered by
their sorted label, so one-hot columns and ordinal indices never depend on
row order. One-hot encoding keeps all k indicator columns of a field with k
categories (no reference level is dropped).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd
from loguru import logger
from sklearn.preprocessing import OneHotEncoder, OrdinalEncoder

from telco_churn.exceptions import EncodingError, SchemaError


class EncodingScheme(str, Enum):
    """Supported categorical encodings."""

    ONEHOT = "onehot"
    ORDINAL = "ordinal"


@dataclass(frozen=True, eq=False)
class FeatureMatrix:
    """Real-valued feature matrix with its column names."""

    values: np.ndarray
    columns: Tuple[str, ...]

    def __post_init__(self):
        values = np.asarray(self.values, dtype=float)
        if values.ndim != 2:
            raise ValueError(f"Feature matrix must be 2-D, got shape {values.shape}")
        if values.shape[1] != len(self.columns):
            raise ValueError(
                f"{values.shape[1]} value columns but {len(self.columns)} column names"
            )
        object.__setattr__(self, "values", values)
        object.__setattr__(self, "columns", tuple(self.columns))

    @property
    def n_rows(self) -> int:
        return self.values.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.values.shape

    def take(self, indices: Sequence[int]) -> "FeatureMatrix":
        """Return the rows at the given positions, in the given order."""
        return FeatureMatrix(self.values[np.asarray(indices, dtype=int)], self.columns)

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame(self.values, columns=list(self.columns))


class CategoricalEncoder:
    """Fit category vocabularies on a table and encode tables with them."""

    def __init__(
        self,
        categorical_fields: Optional[Sequence[str]] = None,
        scheme: Union[str, EncodingScheme] = EncodingScheme.ONEHOT
    ):
        """
        Initialize CategoricalEncoder.

        Args:
            categorical_fields: Fields to encode. If None, non-numeric columns are used
            scheme: 'onehot' or 'ordinal'
        """
        try:
            self.scheme = EncodingScheme(scheme)
        except ValueError:
            raise ValueError(
                f"Unknown encoding scheme: {scheme}. "
                f"Available: {[s.value for s in EncodingScheme]}"
            ) from None

        self.categorical_fields = (
            list(categorical_fields) if categorical_fields is not None else None
        )
        self.encoder = None
        self.input_columns_: List[str] = []
        self.fields_: List[str] = []
        self.categories_: Dict[str, List[str]] = {}

    def fit(self, df: pd.DataFrame) -> "CategoricalEncoder":
        """
        Learn the sorted category vocabulary of every categorical field.

        Args:
            df: Cleaned DataFrame (without the target)

        Returns:
            Fitted encoder
        """
        if self.categorical_fields is None:
            fields = [c for c in df.columns if not pd.api.types.is_numeric_dtype(df[c])]
        else:
            fields = list(self.categorical_fields)

        missing = [f for f in fields if f not in df.columns]
        if missing:
            raise SchemaError(f"Categorical columns not found: {missing}")

        self._check_no_missing(df, fields)

        self.input_columns_ = list(df.columns)
        self.fields_ = fields
        self.categories_ = {
            f: sorted(df[f].astype(str).unique().tolist()) for f in fields
        }

        categories = [self.categories_[f] for f in fields]
        if self.scheme is EncodingScheme.ONEHOT:
            self.encoder = OneHotEncoder(
                categories=categories,
                handle_unknown="error",
                sparse_output=False,
                dtype=float,
            )
        else:
            self.encoder = OrdinalEncoder(categories=categories, dtype=float)

        if fields:
            self.encoder.fit(df[fields].astype(str))

        logger.info(
            f"Fitted {self.scheme.value} encoder on {len(fields)} categorical fields"
        )
        return self

    def transform(self, df: pd.DataFrame) -> FeatureMatrix:
        """
        Encode a table with the fitted vocabularies.

        Args:
            df: DataFrame with the columns seen at fit time

        Returns:
            FeatureMatrix with categorical fields expanded in place

        Raises:
            EncodingError: On unseen categories, non-numeric remaining columns
                or missing values
        """
        if self.encoder is None:
            raise ValueError("Encoder not fitted. Call fit first.")

        missing = [c for c in self.input_columns_ if c not in df.columns]
        if missing:
            raise SchemaError(f"Columns seen at fit time are missing: {missing}")

        self._check_no_missing(df, self.fields_)
        for field in self.fields_:
            unseen = sorted(set(df[field].astype(str)) - set(self.categories_[field]))
            if unseen:
                raise EncodingError(f"Unseen categories in '{field}': {unseen}")

        encoded = None
        if self.fields_:
            encoded = self.encoder.transform(df[self.fields_].astype(str))

        blocks, columns = [], []
        offsets = self._block_offsets()
        for col in self.input_columns_:
            if col in offsets:
                start, stop = offsets[col]
                blocks.append(encoded[:, start:stop])
                columns.extend(self._output_names(col))
            else:
                if not pd.api.types.is_numeric_dtype(df[col]):
                    raise EncodingError(
                        f"Column '{col}' is neither numeric nor declared categorical"
                    )
                blocks.append(df[[col]].to_numpy(dtype=float))
                columns.append(col)

        values = np.hstack(blocks) if blocks else np.empty((len(df), 0))

        nan_cols = [columns[j] for j in np.flatnonzero(np.isnan(values).any(axis=0))]
        if nan_cols:
            raise EncodingError(f"Missing values remain in columns: {nan_cols}")

        logger.debug(f"Encoded matrix shape: {values.shape}")
        return FeatureMatrix(values, columns)

    def fit_transform(self, df: pd.DataFrame) -> FeatureMatrix:
        return self.fit(df).transform(df)

    def get_feature_names(self) -> List[str]:
        """Get names of all features after transformation."""
        names = []
        for col in self.input_columns_:
            names.extend(self._output_names(col) if col in self.categories_ else [col])
        return names

    def _output_names(self, field: str) -> List[str]:
        if self.scheme is EncodingScheme.ONEHOT:
            return [f"{field}_{category}" for category in self.categories_[field]]
        return [field]

    def _block_offsets(self) -> Dict[str, Tuple[int, int]]:
        offsets, start = {}, 0
        for field in self.fields_:
            width = len(self.categories_[field]) if self.scheme is EncodingScheme.ONEHOT else 1
            offsets[field] = (start, start + width)
            start += width
        return offsets

    @staticmethod
    def _check_no_missing(df: pd.DataFrame, fields: Sequence[str]) -> None:
        with_missing = [f for f in fields if df[f].isnull().any()]
        if with_missing:
            raise EncodingError(f"Categorical columns contain missing values: {with_missing}")


def encode(
    df: pd.DataFrame,
    categorical_fields: Optional[Sequence[str]] = None,
    scheme: Union[str, EncodingScheme] = EncodingScheme.ONEHOT
) -> FeatureMatrix:
    """Fit an encoder on df and return its feature matrix."""
    return CategoricalEncoder(categorical_fields, scheme).fit_transform(df)
