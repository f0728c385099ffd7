from __future__ import annotations

from dataclasses import asdict

from fastapi import FastAPI, HTTPException
from fastapi.responses import JSONResponse

from ..sim.core.config import SimulationConfig
from ..sim.core.errors import InvalidArgumentError
from ..sim.core.organism import OrganismSettings
from ..sim.types.snapshot import snapshot_payload
from .controller import SimulationController

app = FastAPI(title="Biosphere Simulation")
controller = SimulationController(SimulationConfig())


@app.on_event("startup")
async def _startup() -> None:
    controller.launch()


@app.on_event("shutdown")
async def _shutdown() -> None:
    await controller.shutdown()


@app.get("/api/status")
async def status() -> JSONResponse:
    snapshot = controller.snapshot
    return JSONResponse(
        {
            "running": controller.running,
            "generation": snapshot.generation,
            "population": snapshot.population,
            "speed": controller.speed_multiplier,
            "controlled": controller.controlled_id,
            "metrics": asdict(snapshot.metrics) if snapshot.metrics is not None else None,
        }
    )


@app.get("/api/snapshot")
async def snapshot() -> JSONResponse:
    return JSONResponse(snapshot_payload(controller.snapshot))


@app.post("/api/control/start")
async def start_simulation() -> JSONResponse:
    controller.start()
    return JSONResponse({"running": True})


@app.post("/api/control/pause")
async def pause_simulation() -> JSONResponse:
    controller.pause()
    return JSONResponse({"running": False})


@app.post("/api/control/speed")
async def set_speed(payload: dict) -> JSONResponse:
    try:
        multiplier = float(payload.get("multiplier", 1.0))
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"invalid multiplier: {exc}") from exc
    speed = controller.set_speed(multiplier)
    return JSONResponse({"multiplier": speed})


@app.post("/api/control/fast-forward")
async def fast_forward(payload: dict) -> JSONResponse:
    try:
        snapshot = await controller.fast_forward(payload.get("generations"))
    except InvalidArgumentError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return JSONResponse({"generation": snapshot.generation, "population": snapshot.population})


@app.post("/api/control/new")
async def new_simulation(payload: dict) -> JSONResponse:
    try:
        settings = OrganismSettings.from_mapping(payload.get("settings"))
        count = payload.get("count")
        count = int(count) if count is not None else None
    except (AttributeError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"invalid settings: {exc}") from exc
    snapshot = await controller.new_simulation(settings, count)
    return JSONResponse({"generation": snapshot.generation, "population": snapshot.population})


@app.post("/api/control/control")
async def take_control(payload: dict) -> JSONResponse:
    try:
        controller.take_control(str(payload.get("id")))
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return JSONResponse({"controlled": controller.controlled_id})


@app.post("/api/control/release")
async def release_control() -> JSONResponse:
    controller.release_control()
    return JSONResponse({"controlled": None})


@app.post("/api/control/move")
async def move_player(payload: dict) -> JSONResponse:
    try:
        direction = [float(v) for v in payload.get("direction", [0.0, 0.0, 0.0])]
        moved = await controller.move_player_organism(direction)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=f"invalid direction: {exc}") from exc
    return JSONResponse({"moved": moved, "controlled": controller.controlled_id})


__all__ = ["app", "controller"]
