__all__ = ["test_misc", "test_progress_display"]
