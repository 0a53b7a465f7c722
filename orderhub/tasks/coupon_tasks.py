from orderhub.tasks.celery_app import celery_app, make_celery_app

app = make_celery_app()

from orderhub.lib.logger import logger  # noqa
from orderhub.services.coupon import CouponService  # noqa


@celery_app.task(bind=True, name="remove_expired_coupons")
def remove_expired_coupons(self):
    with app.app_context():
        try:
            return CouponService.remove_expired_coupons()
        except Exception as e:
            logger.error(f"remove_expired_coupons failed: {e}")
            raise
