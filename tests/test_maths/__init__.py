__all__ = ["test_util"]
