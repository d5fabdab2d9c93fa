import asyncio
import threading
import time

import httpx

from shoproute.api.models import GeoPoint, Stop
from shoproute.api.recompute import RecomputeController
from shoproute.api.services.route_service import RouteAssembler, RouteService

from conftest import ORIGIN, STOPS, make_client, straight_line

SLOW_ORIGIN = GeoPoint(20.0, 85.0)
FAST_ORIGIN = GeoPoint(21.0, 86.0)


def _controller(client, published=None):
    on_publish = published.append if published is not None else None
    return RecomputeController(RouteService(RouteAssembler(client)), on_publish=on_publish)


def _slow_first_handler(calls=None):
    async def handler(request):
        if calls is not None:
            calls.append(request)
        if "85.0,20.0" in request.url.path:
            await asyncio.sleep(0.2)
        return httpx.Response(200, json=straight_line(request))
    return handler


def test_latest_is_none_before_any_computation(line_client):
    assert _controller(line_client).latest is None


def test_refresh_publishes_route(run, line_client):
    published = []
    controller = _controller(line_client, published)

    snapshot = run(controller.refresh(ORIGIN, STOPS))

    assert snapshot is not None
    assert snapshot.generation == 1
    assert len(snapshot.route) == 3
    assert published == [snapshot]
    assert controller.latest is snapshot


def test_superseded_computation_is_never_published(run):
    published = []
    controller = _controller(make_client(_slow_first_handler()), published)

    async def overlapping():
        return await asyncio.gather(
            controller.refresh(SLOW_ORIGIN, STOPS),
            controller.refresh(FAST_ORIGIN, STOPS),
        )

    first, second = run(overlapping())

    assert first is None
    assert second.generation == 2
    assert second.origin == FAST_ORIGIN
    assert published == [second]
    assert controller.latest is second


def test_stale_result_finishing_first_is_also_discarded(run):
    published = []
    controller = _controller(make_client(_slow_first_handler()), published)

    async def overlapping():
        first_generation = controller.observe(FAST_ORIGIN, STOPS)
        second_generation = controller.observe(SLOW_ORIGIN, STOPS)
        return await asyncio.gather(
            controller.recompute(first_generation, FAST_ORIGIN, STOPS),
            controller.recompute(second_generation, SLOW_ORIGIN, STOPS),
        )

    first, second = run(overlapping())

    assert first is None
    assert [snapshot.origin for snapshot in published] == [SLOW_ORIGIN]
    assert controller.latest is second


def test_unchanged_inputs_do_not_recompute(run):
    calls = []
    controller = _controller(make_client(_slow_first_handler(calls)))

    run(controller.refresh(ORIGIN, STOPS))
    request_count = len(calls)

    same_values = [Stop(store=s.store, lat=s.lat, long=s.long) for s in STOPS]
    assert controller.observe((20.3488, 85.8162), same_values) is None
    assert run(controller.refresh(ORIGIN, list(STOPS))) is None
    assert len(calls) == request_count
    assert controller.generation == 1


def test_changed_stop_list_recomputes(run, line_client):
    controller = _controller(line_client)

    run(controller.refresh(ORIGIN, STOPS))
    snapshot = run(controller.refresh(ORIGIN, STOPS[:1]))

    assert snapshot.generation == 2
    assert len(snapshot.route) == 2


def test_nothing_to_route_without_origin_or_stops(run):
    calls = []
    controller = _controller(make_client(_slow_first_handler(calls)))

    assert run(controller.refresh(None, STOPS)) is None
    assert run(controller.refresh(ORIGIN, [])) is None
    assert calls == []
    assert controller.latest is None


def test_clearing_inputs_discards_in_flight_run(run):
    published = []
    controller = _controller(make_client(_slow_first_handler()), published)

    async def clear_while_running():
        generation = controller.observe(SLOW_ORIGIN, STOPS)
        task = asyncio.ensure_future(controller.recompute(generation, SLOW_ORIGIN, STOPS))
        await asyncio.sleep(0)
        controller.observe(SLOW_ORIGIN, [])
        return await task

    assert run(clear_while_running()) is None
    assert published == []
    assert controller.latest is None


def test_leg_failures_are_published_as_empty_paths(run):
    client = make_client(lambda request: httpx.Response(503))
    published = []
    controller = _controller(client, published)

    snapshot = run(controller.refresh(ORIGIN, STOPS))

    assert snapshot.route == ((), (), ())
    assert published == [snapshot]


def test_slow_publish_of_older_run_cannot_land_after_newer_one(line_client):
    rendered = []
    publishing_first = threading.Event()

    def on_publish(snapshot):
        if snapshot.generation == 1:
            publishing_first.set()
            time.sleep(0.3)
        rendered.append(snapshot.generation)

    controller = _controller(line_client)
    controller.on_publish = on_publish

    first_generation = controller.observe(SLOW_ORIGIN, STOPS)
    first = threading.Thread(
        target=asyncio.run,
        args=(controller.recompute(first_generation, SLOW_ORIGIN, STOPS),),
    )
    first.start()
    assert publishing_first.wait(5)

    second_generation = controller.observe(FAST_ORIGIN, STOPS)
    second = threading.Thread(
        target=asyncio.run,
        args=(controller.recompute(second_generation, FAST_ORIGIN, STOPS),),
    )
    second.start()
    first.join(5)
    second.join(5)

    assert rendered[-1] == 2
    assert controller.latest.generation == 2
