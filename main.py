import argparse, logging

from app import StoryViewer
from story_builder import build_stories
import config, web_remote


def _setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
        handlers=[logging.StreamHandler(),
                  logging.FileHandler(config.LOG_FILE, encoding="utf-8")],
    )


def main(argv=None):
    ap = argparse.ArgumentParser(description="Play a folder of stories")
    ap.add_argument("root", nargs="?", default=config.STORIES_PATH,
                    help=f"story folder (default: ./{config.STORIES_PATH})")
    ap.add_argument("--start", type=int, default=config.START_INDEX,
                    help="index of the first story")
    ap.add_argument("--repeat", action="store_true", default=config.REPEAT,
                    help="loop forever")
    ap.add_argument("--no-remote", action="store_true", help="skip the web remote")
    ap.add_argument("-v", "--verbose", action="store_true")
    args = ap.parse_args(argv)

    _setup_logging(args.verbose)
    items = build_stories(args.root)
    viewer = StoryViewer(items, start_index=args.start, repeat=args.repeat)
    if not args.no_remote:
        web_remote.start(viewer)  # viewer = current StoryViewer instance
    viewer.run()

if __name__ == "__main__":
    main()
