#!/usr/bin/env python3
"""
RetailPOS Startup Script
Launches the API server, dashboard, Celery worker and Celery beat.
"""
import os
import sys
import subprocess
import time
import signal
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent
sys.path.insert(0, str(project_root))

from retailpos.core.config import settings


class RetailPOSLauncher:
    """Launcher for RetailPOS application components."""

    def __init__(self):
        self.processes = []
        self.running = True

    def _spawn(self, name: str, cmd: list):
        process = subprocess.Popen(cmd, cwd=str(project_root))
        self.processes.append((name, process))
        return process

    def start_api_server(self):
        """Start the FastAPI server."""
        print("🚀 Starting RetailPOS API Server...")
        cmd = [
            sys.executable, "-m", "uvicorn",
            "retailpos.main:app",
            "--host", "0.0.0.0",
            "--port", "8000",
        ]
        cmd += ["--reload"] if settings.debug else ["--workers", "4"]
        self._spawn("API Server", cmd)
        print("✅ API Server started on http://localhost:8000")

    def start_dashboard(self):
        """Start the Dash dashboard."""
        print("📊 Starting RetailPOS Dashboard...")
        self._spawn("Dashboard", [sys.executable, "-m", "retailpos.dashboard.main"])
        print(f"✅ Dashboard started on http://localhost:{settings.dashboard_port}")

    def start_celery_worker(self):
        print("🔧 Starting Celery Worker...")
        self._spawn("Celery Worker", [
            sys.executable, "-m", "celery",
            "-A", "retailpos.worker.celery",
            "worker",
            "--loglevel=info",
            "--concurrency=4"
        ])
        print("✅ Celery Worker started")

    def start_celery_beat(self):
        print("⏰ Starting Celery Beat...")
        self._spawn("Celery Beat", [
            sys.executable, "-m", "celery",
            "-A", "retailpos.worker.celery",
            "beat",
            "--loglevel=info"
        ])
        print("✅ Celery Beat started")

    def check_environment(self) -> bool:
        print("🔍 Checking environment...")
        if not os.path.exists(project_root / ".env"):
            print("⚠️  .env file not found. Copy env.example to .env and configure it.")
            return False
        if not settings.dashboard_password:
            print("⚠️  DASHBOARD_PASSWORD is not set; the dashboard will not be able to log in.")
        return True

    def signal_handler(self, signum, frame):
        """Handle shutdown signals."""
        print("\n🛑 Shutting down RetailPOS...")
        self.running = False

    def shutdown(self):
        """Shutdown all processes."""
        print("🔄 Stopping all processes...")
        for name, process in self.processes:
            try:
                process.terminate()
                process.wait(timeout=5)
                print(f"✅ {name} stopped")
            except subprocess.TimeoutExpired:
                process.kill()
                print(f"⚠️  {name} force killed")

    def run(self):
        """Run the RetailPOS application."""
        print("🎯 RetailPOS - Point of Sale & Store Administration")
        print("=" * 60)

        if not self.check_environment():
            print("❌ Environment check failed. Please fix the issues above.")
            return

        signal.signal(signal.SIGINT, self.signal_handler)
        signal.signal(signal.SIGTERM, self.signal_handler)

        try:
            self.start_api_server()
            time.sleep(2)

            self.start_dashboard()
            self.start_celery_worker()
            self.start_celery_beat()

            print("\n🎉 RetailPOS is now running!")
            print("📱 API Documentation: http://localhost:8000/docs (debug mode)")
            print(f"📊 Dashboard: http://localhost:{settings.dashboard_port}")
            print("🔍 Health Check: http://localhost:8000/health")
            print("\nPress Ctrl+C to stop all services")

            while self.running:
                for name, process in self.processes:
                    if process.poll() is not None:
                        print(f"❌ {name} stopped unexpectedly (exit code {process.returncode})")
                        self.running = False
                        break
                time.sleep(1)
        finally:
            self.shutdown()
            print("👋 RetailPOS stopped")


if __name__ == "__main__":
    launcher = RetailPOSLauncher()
    launcher.run()
