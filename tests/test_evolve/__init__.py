__all__ = ["test_fast_distance"]
