from alignkit.util.progress_display import (
    NULL_CONTEXT,
    NullContext,
    ProgressContext,
    display_wrap,
)


@display_wrap
def _collect(items, ui=None):
    return ui, list(ui.series(items, noun="item"))


def test_display_wrap_null_by_default():
    ui, got = _collect([1, 2, 3])
    assert ui is NULL_CONTEXT
    assert got == [1, 2, 3]


def test_display_wrap_not_a_terminal():
    # pytest captures stdout
    ui, got = _collect(iter("abc"), show_progress=True)
    assert ui is NULL_CONTEXT
    assert got == ["a", "b", "c"]


def test_progress_context_series():
    ui = ProgressContext(mininterval=0)
    assert list(ui.series(iter("abc"), noun="char")) == ["a", "b", "c"]
    assert ui.progress_bar.n == 3
    ui.done()
    assert ui.progress_bar is None


def test_subcontext_depth():
    ui = ProgressContext()
    assert ui.subcontext().depth == 1
    assert NULL_CONTEXT.subcontext() is NULL_CONTEXT


def test_series_empty():
    assert list(ProgressContext().series([])) == []
    assert list(NullContext().series([])) == []
