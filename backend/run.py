"""
Duofu Intake Bot — Uvicorn Launcher
Run this file to start the development server.

Usage:
    python run.py
    python run.py --port 3000
    python run.py --reload
"""
import argparse
import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Duofu Intake Bot Server")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=3000, help="Bind port (default: 3000)")
    parser.add_argument("--reload", action="store_true", help="Enable hot reload for development")

    args = parser.parse_args()

    print(f"""
    ========================================================
      Duofu Intake Bot -- LINE Webhook Server
      Webhook: http://{args.host}:{args.port}/webhook
      Docs:    http://localhost:{args.port}/docs
      Admin:   http://localhost:{args.port}/api/admin/sessions
    ========================================================
    """)

    # Sessions live in process memory, so a single worker keeps one conversation
    # state per user.
    uvicorn.run(
        "intakebot.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=1,
        log_level="info",
    )


if __name__ == "__main__":
    main()
