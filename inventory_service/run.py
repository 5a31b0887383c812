import argparse
import os
import uvicorn


def build_parser() -> argparse.ArgumentParser:
    # -h is the host option, so help is only reachable as --help
    parser = argparse.ArgumentParser(description="Run Inventory API", add_help=False)
    parser.add_argument("--help", action="help", help="Show this help message and exit")
    parser.add_argument("-h", "--host", required=True)
    parser.add_argument("-p", "--port", type=int, required=True)
    parser.add_argument("-c", "--cache", required=True, help="Content directory for photos and the JSON record file")
    parser.add_argument("--record-store", choices=["json", "sql"], default=None, help="Record store backend")
    parser.add_argument("--reload", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)

    os.environ["CACHE_DIR"] = args.cache
    if args.record_store:
        os.environ["RECORD_STORE"] = args.record_store

    uvicorn.run("inventory_service.main:app", host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
