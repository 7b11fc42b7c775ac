"""
フォロー移行スクリプト（follows -> user_domain_map）

使い方:
    python -m offer_alert.scripts.run_domain_migration

データ移行時に1回だけ実行する。再実行しても重複行は作られない。
"""
import sys
import logging
from datetime import datetime

from dotenv import load_dotenv
load_dotenv()

from offer_alert.services.migration import run_follow_migration

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)


def main():
    """メイン処理"""
    print("=" * 60)
    print("🚚 フォロー移行処理")
    print(f"   実行日時: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 60)

    result = run_follow_migration()
    if result is None:
        print("\n❌ follows テーブルの取得に失敗しました")
        return 1

    print("\n📊 実行結果:")
    print(f"   フォロー件数: {result['total']}")
    print(f"   移行成功: {result['migrated']}")
    print(f"   追加マッピング: {result['mappings_added']}")
    print(f"   エラー: {result['errors']}")
    print(f"   処理時間: {result['duration_seconds']:.2f}秒")

    print("\n✅ 移行処理が完了しました")
    return 0


if __name__ == "__main__":
    sys.exit(main())
