__all__ = [
    "test_alignment",
    "test_alphabet",
    "test_genetic_code",
    "test_pattern",
    "test_profile",
    "test_reading_frame",
    "test_seqbag",
    "test_sequence",
    "test_simulate",
    "test_stream",
]
