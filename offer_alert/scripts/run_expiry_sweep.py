"""
期限切れオファー同期スクリプト

使い方:
    python -m offer_alert.scripts.run_expiry_sweep

cronで定期実行する場合:
    0 */6 * * * cd /path/to/project && python -m offer_alert.scripts.run_expiry_sweep >> /var/log/expiry_sweep.log 2>&1
"""
import sys
import logging

from dotenv import load_dotenv
load_dotenv()

from offer_alert.services.expiry_sweep import run_expired_offer_sweep

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


def main():
    """メイン処理"""
    try:
        result = run_expired_offer_sweep()
    except Exception as e:
        logging.getLogger(__name__).exception(f"期限切れ同期でエラーが発生: {str(e)}")
        return 1
    return 0 if result["errors"] == 0 else 1


if __name__ == "__main__":
    sys.exit(main())
