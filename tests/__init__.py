__all__ = ["test_core", "test_evolve", "test_maths", "test_util"]
