from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import (
    agents,
    availability,
    bills,
    discounts,
    guests,
    meal_plans,
    reservations,
    room_types,
    rooms,
)
from app.core.config import get_settings
from app.core.logging import configure_logging

settings = get_settings()
configure_logging(settings.log_level)

app = FastAPI(title=settings.app_name)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Update this in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.api_route("/ping", methods=["GET", "HEAD", "OPTIONS"], tags=["public"])
async def ping() -> dict[str, str]:
    return {"status": "ok"}


# Include routers: inventory
app.include_router(room_types.router)
app.include_router(rooms.router)
app.include_router(meal_plans.router)
app.include_router(discounts.router)

# Include routers: front desk
app.include_router(guests.router)
app.include_router(agents.router)
app.include_router(availability.router)
app.include_router(reservations.router)
app.include_router(bills.router)


@app.get("/", tags=["public"])
async def root() -> dict[str, str]:
    return {"message": f"Welcome to {settings.app_name}"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
