from nerned_eval.readers import tsv  # noqa: F401

__all__ = ["tsv"]
