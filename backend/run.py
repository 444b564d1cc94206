"""
Mamata Nepal Payments — Uvicorn Launcher
Run this file to start the development server.

Usage:
    python run.py
    python run.py --port 3001
    python run.py --reload
"""
import argparse
import uvicorn


def main():
    parser = argparse.ArgumentParser(description="Mamata Nepal eSewa Payment Server")
    parser.add_argument("--host", default="0.0.0.0", help="Bind host (default: 0.0.0.0)")
    parser.add_argument("--port", type=int, default=3001, help="Bind port (default: 3001)")
    parser.add_argument("--reload", action="store_true", help="Enable hot reload for development")
    parser.add_argument("--workers", type=int, default=1, help="Number of workers (default: 1)")
    parser.add_argument("--timeout", type=int, default=30, help="Keep-alive timeout in seconds (default: 30)")

    args = parser.parse_args()

    print(f"""
    ========================================================
      Mamata Nepal -- eSewa Payment Server
      API:       http://{args.host}:{args.port}/api/initiate-payment
      Callbacks: http://{args.host}:{args.port}/api/esewa/payment/success|failure
      Docs:      http://localhost:{args.port}/docs
    ========================================================
    """)

    uvicorn.run(
        "mamata.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers,
        timeout_keep_alive=args.timeout,
        log_level="info",
    )


if __name__ == "__main__":
    main()
