import asyncio
import logging

import pytest

from schemas.catalog import Order, Presentation
from views import (
    SUBMIT_FAILED_MESSAGE,
    CatalogView,
    DetailView,
    ReviewForm,
    ViewState,
)


@pytest.mark.asyncio
async def test_catalog_loads_both_collections_once(store):
    view = CatalogView(store)
    await view.load()

    assert store.calls["list_pavilions"] == 1
    assert store.calls["list_reviews"] == 1
    rendered = view.render()
    assert rendered.presentation is Presentation.list
    assert rendered.order is Order.default
    assert [item.id for item in rendered.items] == [1, 2, 3]
    assert rendered.items[0].summary == "1/2 people would return"
    assert rendered.items[2].summary == "no ratings yet"
    assert rendered.items[2].approval_ratio == -1


@pytest.mark.asyncio
async def test_toggles_never_refetch(store):
    view = CatalogView(store)
    await view.load()

    view.toggle_presentation()
    assert view.render().presentation is Presentation.block
    view.toggle_order()
    assert [item.id for item in view.render().items] == [2, 1, 3]
    view.set_order(Order.default)
    view.set_presentation("list")
    assert [item.id for item in view.render().items] == [1, 2, 3]
    view.toggle_order()
    view.toggle_presentation()
    view.render()

    assert store.calls["list_pavilions"] == 1
    assert store.calls["list_reviews"] == 1


@pytest.mark.asyncio
async def test_toggles_are_independent(store):
    view = CatalogView(store)
    await view.load()
    view.toggle_order()
    view.toggle_presentation()
    view.toggle_presentation()
    assert view.order is Order.rating
    assert view.presentation is Presentation.list


@pytest.mark.asyncio
async def test_review_failure_still_shows_pavilions(store):
    store.fail_reviews = True
    view = CatalogView(store)
    await view.load()

    assert view.reviews == []
    items = view.render().items
    assert [item.id for item in items] == [1, 2, 3]
    assert all(item.summary == "no ratings yet" for item in items)


@pytest.mark.asyncio
async def test_pavilion_failure_keeps_reviews(store):
    store.fail_pavilions = True
    view = CatalogView(store)
    await view.load()

    assert view.pavilions == []
    assert len(view.reviews) == 4
    assert view.render().items == []


@pytest.mark.asyncio
async def test_select_shows_description_and_matching_reviews(store):
    view = CatalogView(store)
    await view.load()

    selection = view.select(1)
    assert selection.pavilion.description == "Description of pavilion 1"
    assert [r.id for r in selection.reviews] == [1, 2]
    assert selection.summary == "1/2 people would return"
    assert view.select(404) is None
    assert store.calls["list_reviews"] == 1


@pytest.mark.asyncio
async def test_catalog_form_updates_summary_without_refetch(store):
    view = CatalogView(store)
    await view.load()

    form = view.review_form(3)
    form.comment = "Great show!"
    form.again = True
    created = await form.submit()

    assert created is not None
    assert view.select(3).summary == "1/1 people would return"
    assert store.calls["list_reviews"] == 1


@pytest.mark.asyncio
async def test_detail_loads_reviews_newest_first(store, review_factory):
    store.reviews.append(review_factory(9, 1, again=True))
    view = DetailView(store, 1)
    assert view.state is ViewState.loading

    await view.load()

    assert view.state is ViewState.ready
    assert [r.id for r in view.reviews] == [9, 2, 1]
    assert view.render().summary == "2/3 people would return"


@pytest.mark.asyncio
async def test_detail_not_found_skips_review_fetch(store):
    view = DetailView(store, 404)
    await view.load()

    assert view.state is ViewState.not_found
    assert view.render() is None
    assert store.calls["list_reviews"] == 0


@pytest.mark.asyncio
async def test_detail_pavilion_failure_is_not_found(store):
    store.fail_pavilions = True
    view = DetailView(store, 1)
    await view.load()
    assert view.state is ViewState.not_found


@pytest.mark.asyncio
async def test_detail_review_failure_renders_empty_list(store):
    store.fail_reviews = True
    view = DetailView(store, 1)
    await view.load()

    assert view.state is ViewState.ready
    assert view.render().reviews == []


@pytest.mark.asyncio
async def test_submit_defaults_name_and_shows_review(store):
    view = DetailView(store, 2)
    await view.load()

    view.form.comment = "Great show!"
    view.form.again = True
    created = await view.form.submit()

    assert store.inserted == [
        {"pavilion_id": 2, "name": "anonymous", "comment": "Great show!", "again": True}
    ]
    assert created.name == "anonymous"
    assert view.reviews[0] == created
    assert view.render().reviews[0].comment == "Great show!"
    assert view.form.comment == ""
    assert view.form.again is None
    assert view.form.is_open is False
    assert store.calls["list_reviews"] == 1


@pytest.mark.asyncio
async def test_empty_comment_is_blocked(store):
    form = ReviewForm(store, 2)
    form.again = True
    assert form.can_submit is False
    assert await form.submit() is None

    form.comment = "   "
    assert await form.submit() is None
    assert store.calls["insert_review"] == 0


@pytest.mark.asyncio
async def test_again_must_be_chosen(store):
    form = ReviewForm(store, 2)
    form.comment = "Nice"
    assert form.can_submit is False
    assert await form.submit() is None

    form.again = False
    assert form.can_submit is True
    assert store.calls["insert_review"] == 0


@pytest.mark.asyncio
async def test_failed_submit_keeps_input(store):
    store.fail_insert = True
    view = DetailView(store, 1)
    await view.load()
    view.form.name = "Yuki"
    view.form.comment = "Will come back"
    view.form.again = True

    assert await view.form.submit() is None

    assert view.form.error == SUBMIT_FAILED_MESSAGE
    assert view.form.name == "Yuki"
    assert view.form.comment == "Will come back"
    assert view.form.again is True
    assert view.form.is_open is True
    assert view.form.in_flight is False
    assert [r.id for r in view.reviews] == [2, 1]


@pytest.mark.asyncio
async def test_retry_after_failure_succeeds(store):
    store.fail_insert = True
    form = ReviewForm(store, 1)
    form.comment = "Again"
    form.again = False
    await form.submit()

    store.fail_insert = False
    created = await form.submit()
    assert created is not None
    assert form.error is None
    assert store.calls["insert_review"] == 2


@pytest.mark.asyncio
async def test_second_click_while_in_flight_is_ignored(store):
    store.insert_gate = asyncio.Event()
    form = ReviewForm(store, 2)
    form.comment = "Great show!"
    form.again = True

    first = asyncio.create_task(form.submit())
    await asyncio.sleep(0)
    assert form.in_flight is True
    assert form.can_submit is False

    assert await form.submit() is None

    store.insert_gate.set()
    created = await first
    assert created is not None
    assert store.calls["insert_review"] == 1
    assert len(store.inserted) == 1


@pytest.mark.asyncio
async def test_not_found_view_cannot_submit(store):
    view = DetailView(store, 404)
    await view.load()
    view.form.comment = "Great show!"
    view.form.again = True

    assert view.state is ViewState.not_found
    assert view.form.can_submit is False
    assert await view.form.submit() is None
    assert store.calls["insert_review"] == 0


@pytest.mark.asyncio
async def test_detail_form_closed_until_loaded(store):
    view = DetailView(store, 1)
    view.form.comment = "Early"
    view.form.again = True
    assert await view.form.submit() is None

    await view.load()
    assert view.form.can_submit is True


@pytest.mark.asyncio
async def test_detail_form_reopens_for_another_review(store):
    view = DetailView(store, 1)
    await view.load()
    view.form.comment = "First"
    view.form.again = True
    await view.form.submit()
    assert view.form.is_open is False

    view.form.open()
    view.form.comment = "Second"
    view.form.again = False
    assert await view.form.submit() is not None
    assert [r.comment for r in view.reviews[:2]] == ["Second", "First"]


@pytest.mark.asyncio
async def test_null_name_rows_show_as_anonymous(store, review_factory):
    store.reviews.append(review_factory(9, 1, again=True, name=None))
    store.reviews.append(review_factory(10, 1, again=False, name="  "))
    view = DetailView(store, 1)
    await view.load()

    names = [r.name for r in view.render().reviews]
    assert names == ["anonymous", "anonymous", "Taro", "Taro"]


@pytest.mark.asyncio
async def test_form_opened_before_load_updates_catalog(store):
    view = CatalogView(store)
    form = view.review_form(3)
    await view.load()

    form.comment = "Great show!"
    form.again = True
    assert await form.submit() is not None
    assert view.select(3).summary == "1/1 people would return"


@pytest.mark.asyncio
async def test_form_survives_catalog_reload(store):
    view = CatalogView(store)
    await view.load()
    form = view.review_form(3)
    await view.load()

    form.comment = "Worth the queue"
    form.again = False
    await form.submit()
    assert view.select(3).summary == "0/1 people would return"


@pytest.mark.asyncio
async def test_failures_log_under_pavilions_logger(store, caplog):
    caplog.set_level(logging.WARNING, logger="pavilions")
    store.fail_reviews = True
    store.fail_insert = True

    view = DetailView(store, 1)
    await view.load()
    view.form.comment = "Hello"
    view.form.again = True
    await view.form.submit()

    names = {record.name for record in caplog.records}
    assert names == {"pavilions.views"}
    assert any(record.levelno == logging.ERROR for record in caplog.records)
