"""Features module for categorical encoding."""

from .encoder import CategoricalEncoder, EncodingScheme, FeatureMatrix, encode

__all__ = ["CategoricalEncoder", "EncodingScheme", "FeatureMatrix", "encode"]
