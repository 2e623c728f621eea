def make_alternatives(texts=("3", "4", "5", "6"), correct=1):
    """Alternative payloads; `correct` is the index of the right answer (None for none)."""
    return [{"text": t, "is_correct": i == correct} for i, t in enumerate(texts)]
