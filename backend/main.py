"""
StreamTV VPN Backend - Main API Server

A FastAPI-based backend for the desktop streaming client: parses WireGuard
and OpenVPN configs and drives the installed VPN clients.
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Import route handlers
import vpn_routes
import system_routes
from config_manager import load_config_or_default

# Create FastAPI app
app = FastAPI(
    title="StreamTV VPN Backend",
    version="1.0.0",
    description="Detect, configure and connect WireGuard and OpenVPN tunnels"
)

# CORS middleware for the desktop webview
app.add_middleware(
    CORSMiddleware,
    allow_origins=load_config_or_default().allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(vpn_routes.router, prefix="/api/vpn", tags=["VPN"])
app.include_router(system_routes.router, prefix="/api/system", tags=["System"])


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {
        "message": "StreamTV VPN Backend API",
        "version": "1.0.0",
        "docs": "/docs",
        "redoc": "/redoc"
    }


def run():
    import uvicorn
    from config_manager import load_config

    config = load_config()
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)


if __name__ == "__main__":
    run()
