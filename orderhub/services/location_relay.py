import const
from orderhub.lib.logger import log_socket_message
from orderhub.models.order import Order
from orderhub.services.order_events import user_room


class LocationRelay:
    """Republish rider positions to the order owner, admins and partners.

    Nothing is stored; unknown order ids and lookup failures are dropped so a
    rider is never blocked from reporting its position.
    """

    def __init__(self, events):
        self.events = events

    @staticmethod
    def owner_of(order_id):
        order = Order.objects(order_id=str(order_id)).only("user_id").first()
        return order.user_id if order else None

    def report_location(self, connection_id, order_id, latitude, longitude):
        if not order_id:
            return None
        try:
            owner = self.owner_of(order_id)
        except Exception as e:
            log_socket_message(
                f"Location lookup for {order_id} from {connection_id} failed: {e}", "WARNING"
            )
            return None
        if not owner:
            log_socket_message(
                f"Dropping location for unknown order {order_id} from {connection_id}", "DEBUG"
            )
            return None

        rooms = {user_room(owner), const.ADMIN_ROOM, const.PARTNER_ROOM}
        payload = {"orderId": order_id, "latitude": latitude, "longitude": longitude}
        return self.events.publish(const.EVENT_RIDER_LOCATION_UPDATE, payload, rooms)
