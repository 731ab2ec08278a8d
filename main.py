"""
DGT-TM 翻譯記憶匯出工具 - 主程式入口
DGT Translation Memory Exporter - Main Entry Point

將 DGT-TM 的 TMX 壓縮檔目錄匯入 SQLite 資料庫
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

from dgt_parser.config.export_config import ExportConfig
from dgt_parser.config.logging_config import setup_logging
from dgt_parser.config.settings import set_environment
from dgt_parser.core.pipeline import ExportPipeline, ExportPipelineError
from dgt_parser.models.report import ExportReport
from dgt_parser.utils.language_codes import resolve_language_aliases


def setup_argument_parser() -> argparse.ArgumentParser:
    """設定命令列參數解析器"""
    parser = argparse.ArgumentParser(
        description='DGT-TM 翻譯記憶匯出工具',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
範例用法:
  # 匯出所有語言
  python main.py -i data/dgt sqlite -o output/dgt.sqlite

  # 只保留英文與波蘭文，且兩者都必須存在
  python main.py -i data/dgt -l en -l pl -r sqlite -o output/en_pl.sqlite

  # 覆蓋既有資料庫並建立全文檢索索引
  python main.py -i data/dgt --workers 8 sqlite -o output/dgt.sqlite --overwrite --fts
        """
    )

    # 必須參數
    parser.add_argument(
        '-i', '--input-dir',
        type=str,
        required=True,
        help='DGT-TM 壓縮檔目錄 (必須)'
    )

    # 可選參數
    parser.add_argument(
        '-l', '--lang',
        action='append',
        metavar='LANG',
        help='保留的語言，可重複指定 (預設: 全部)'
    )

    parser.add_argument(
        '-r', '--require-each-lang',
        action='store_true',
        help='只保留包含所有指定語言的翻譯單元 (需搭配 --lang)'
    )

    parser.add_argument(
        '--no-lang-aliases',
        action='store_true',
        help='不將簡短語言名稱轉換為 DGT 語言代碼 (例如 en -> EN-GB)'
    )

    parser.add_argument(
        '--workers',
        type=int,
        help='解析 worker 數 (預設: 依執行環境)'
    )

    parser.add_argument(
        '--batch-size',
        type=int,
        help='每個交易寫入的列數 (預設: 依執行環境)'
    )

    parser.add_argument(
        '--environment',
        type=str,
        default='production',
        choices=['development', 'testing', 'staging', 'production'],
        help='執行環境 (預設: production)'
    )

    parser.add_argument(
        '--log-level',
        type=str,
        default='INFO',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='日誌級別 (預設: INFO)'
    )

    parser.add_argument(
        '--verbose',
        action='store_true',
        help='詳細輸出模式'
    )

    # 輸出格式
    subparsers = parser.add_subparsers(dest='format', required=True, help='輸出格式')

    sqlite_parser = subparsers.add_parser('sqlite', help='匯出為 SQLite 資料庫')
    sqlite_parser.add_argument(
        '-o', '--output',
        type=str,
        required=True,
        help='輸出資料庫路徑 (必須)'
    )
    sqlite_parser.add_argument(
        '--overwrite',
        action='store_true',
        help='輸出檔案已存在時覆蓋'
    )
    sqlite_parser.add_argument(
        '--fts',
        action='store_true',
        help='建立 FTS5 全文檢索索引'
    )

    return parser


def validate_arguments(args: argparse.Namespace) -> None:
    """驗證命令列參數"""
    # 檢查輸入目錄是否存在
    input_dir = Path(args.input_dir)
    if not input_dir.is_dir():
        raise ValueError(f"Input directory does not exist: {args.input_dir}")

    if args.require_each_lang and not args.lang:
        raise ValueError("--require-each-lang requires at least one --lang")

    if args.workers is not None and args.workers < 0:
        raise ValueError(f"Workers cannot be negative: {args.workers}")

    if args.batch_size is not None and args.batch_size <= 0:
        raise ValueError(f"Batch size must be positive: {args.batch_size}")


def build_export_config(args: argparse.Namespace) -> ExportConfig:
    """由命令列參數建立匯出配置"""
    languages = args.lang or []
    if not args.no_lang_aliases:
        languages = resolve_language_aliases(languages)

    return ExportConfig.from_environment(
        input_dir=args.input_dir,
        output_path=args.output,
        languages=languages,
        require_each_language=args.require_each_lang,
        environment=args.environment,
        max_workers=args.workers,
        batch_size=args.batch_size,
        overwrite=args.overwrite,
        build_fts=args.fts,
    )


def print_system_info(args: argparse.Namespace, config: ExportConfig) -> None:
    """印出系統資訊"""
    print("=" * 80)
    print("DGT-TM 翻譯記憶匯出工具")
    print("DGT Translation Memory Exporter")
    print("=" * 80)
    print(f"輸入目錄: {config.input_dir}")
    print(f"輸出資料庫: {config.output_path}")
    print(f"執行環境: {args.environment}")
    if config.allowed_languages:
        print(f"語言: {', '.join(sorted(config.allowed_languages))}")
        print(f"要求所有語言: {'是' if config.require_each_language else '否'}")
    else:
        print("語言: 全部")
    print(f"Worker 數: {config.max_workers}")
    print(f"批次大小: {config.batch_size}")
    print(f"全文檢索索引: {'建立' if config.build_fts else '不建立'}")
    print("-" * 80)


def print_report(report: ExportReport) -> None:
    """印出匯出結果摘要"""
    print("\n" + "=" * 80)
    print("匯出結果摘要")
    print("=" * 80)
    print(f"壓縮檔數: {report.archives_scanned}")
    print(f"文件數: {report.documents_seen}")
    print(f"成功寫入: {report.documents_written}")
    print(f"解析失敗: {report.documents_failed}")
    print(f"成功率: {report.get_success_rate():.2%}")
    print(f"翻譯單元: {report.units_written} 寫入 / {report.units_excluded} 排除")
    print(f"語言欄位: {', '.join(report.language_columns) or '無'}")
    print(f"處理時間: {report.elapsed_time:.2f} 秒")

    summary = report.get_error_summary()
    if summary:
        print("\n" + "-" * 40)
        print("錯誤統計")
        print("-" * 40)
        for error_type, count in sorted(summary.items()):
            print(f"{error_type}: {count}")
    print("=" * 80)


def run_export(config: ExportConfig) -> None:
    """執行匯出"""
    logger = logging.getLogger(__name__)

    try:
        logger.info("Starting export...")
        report = ExportPipeline(config).run()
        print_report(report)
        logger.info(f"Export completed: {config.output_path}")

    except ExportPipelineError as e:
        logger.error(f"Export failed: {e}")
        print_report(e.report)
        sys.exit(1)


def main(argv: Optional[List[str]] = None) -> None:
    """主程式入口"""
    try:
        # 載入環境變數
        load_dotenv()

        # 解析命令列參數
        parser = setup_argument_parser()
        args = parser.parse_args(argv)

        # 驗證參數
        validate_arguments(args)

        # 設定環境
        set_environment(args.environment)

        # 設定日誌
        setup_logging(
            log_level=args.log_level,
            verbose=args.verbose
        )

        config = build_export_config(args)

        # 印出系統資訊
        print_system_info(args, config)

        # 執行匯出
        run_export(config)

    except KeyboardInterrupt:
        print("\n程式被使用者中斷")
        sys.exit(1)
    except Exception as e:
        print(f"錯誤: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
