import argparse
import asyncio
import logging
import sys

from pydantic import ValidationError

from service.catalog import CatalogIndex
from service.config import ConfigError, build_store, load_settings
from service.errors import CatalogLoadError, StoreError
from service.importer import CatalogImporter
from service.meta import QuestionMetaManager
from service.progress import CompletionStore, LoadStatus
from service.selector import QuestionSelector, SelectionMode

from controller.session_controller import DrillSession

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )
    # 降低第三方库噪音
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def build_parser():
    parser = argparse.ArgumentParser(prog="drill", description="刷题抽题与完成进度同步")
    parser.add_argument("--env-file", default=None, help=".env 文件路径")
    parser.add_argument("--log-level", default="INFO")
    sub = parser.add_subparsers(dest="command", required=True)

    pick = sub.add_parser("pick", help="抽取一批未完成的题目")
    pick.add_argument("-n", type=int, default=5)
    pick.add_argument("--category", default=None)
    pick.add_argument("--subcategory", default=None)
    pick.add_argument("--mode", choices=[m.value for m in SelectionMode], default=SelectionMode.RANDOM.value)
    pick.add_argument("--seed", default=None, help="固定随机种子，便于复现")

    done = sub.add_parser("done", help="标记题目已完成并保存")
    done.add_argument("ids", nargs="+")

    sub.add_parser("status", help="显示完成进度")
    return parser


def build_session(settings, seed=None):
    catalog = CatalogImporter().import_from_file(settings.catalog_path, settings.catalog_root)
    index = CatalogIndex.from_catalog(catalog)
    store = CompletionStore(
        build_store(settings),
        path=settings.progress_path,
        max_attempts=settings.save_attempts,
    )
    selector = QuestionSelector.from_seed(seed) if seed else QuestionSelector()
    return DrillSession(index, store, selector)


async def run(args, settings) -> int:
    session = build_session(settings, getattr(args, "seed", None))

    result = await session.load_progress()
    if result.status is LoadStatus.NOT_FOUND:
        print(f"未找到 '{settings.progress_path}'，保存时将新建。")

    if args.command == "pick":
        questions = session.generate(
            args.n,
            category=args.category,
            subcategory=args.subcategory,
            mode=SelectionMode(args.mode),
        )
        if not questions:
            print("没有符合条件的题目，或已全部完成！")
            return 0
        for q in questions:
            line = f"[ ] {q.id}\t{q.title}"
            if q.link:
                line += f"\t{q.link}"
            print(line)
        return 0

    if args.command == "done":
        for qid in args.ids:
            if not session.mark_done(qid):
                print(f"跳过 {qid}（已完成或不在目录中）")
        saved = await session.save_progress()
        if saved.skipped:
            print("没有需要保存的新题目。")
        else:
            print(f"已保存 {saved.saved} 道新完成题目，共完成 {saved.total} 道。")
        return 0

    if args.command == "status":
        meta = QuestionMetaManager(session.index)
        total = len(session.index)
        print(f"已完成 {len(session.completion.master)} / {total}")
        for category in meta.get_categories():
            left = meta.count(category, exclude=session.completion.master)
            print(f"  {category}: 剩余 {left} / {meta.count(category)}")
        return 0

    return 2


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        settings = load_settings(args.env_file)
        return asyncio.run(run(args, settings))
    except (ConfigError, ValidationError) as e:
        logger.error("配置错误: %s", e)
    except CatalogLoadError as e:
        logger.error("题目目录加载失败: %s", e)
    except StoreError as e:
        logger.error("进度同步失败: %s", e)
    return 1


if __name__ == "__main__":
    sys.exit(main())
