import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

import resend

from .utils import normalize_email

logger = logging.getLogger(__name__)


class OrderNotifier:
    """Sends order emails through Resend on a background executor.

    Delivery is fire-and-forget: every send reports ``(sent, error)`` and a
    failure is only logged.
    """

    def __init__(
        self,
        api_key: str,
        sender: str,
        executor: Optional[ThreadPoolExecutor] = None,
    ):
        self.api_key = (api_key or "").strip()
        self.sender = sender
        self.executor = executor or ThreadPoolExecutor(
            max_workers=2, thread_name_prefix="order-mail"
        )

    def send_email(self, payload: Dict[str, object]) -> Tuple[bool, Optional[str]]:
        if not self.api_key:
            return False, "Resend API key is not configured."

        previous_api_key = getattr(resend, "api_key", None)
        resend.api_key = self.api_key
        try:
            response = resend.Emails.send(payload)
        except Exception as exc:
            return False, str(exc)
        finally:
            resend.api_key = previous_api_key

        if not isinstance(response, dict) or not response.get("id"):
            return False, str(response)

        return True, None

    def build_email(self, recipient: str, subject: str, message: str) -> Dict[str, object]:
        return {
            "from": self.sender,
            "to": [recipient],
            "subject": subject,
            "html": f"<p>{message}</p>",
            "text": message,
        }

    def build_order_emails(self, order: Dict[str, object], order_id) -> List[Dict[str, object]]:
        customer = order.get("customer") or {}
        customer_email = normalize_email(customer.get("email"))
        seller_email = normalize_email(order.get("seller"))

        emails = []
        if customer_email:
            emails.append(
                self.build_email(
                    customer_email,
                    "Order Successful",
                    f"You've placed an order successfully. Transaction Id: {order_id}",
                )
            )
        if seller_email:
            emails.append(
                self.build_email(
                    seller_email,
                    "Hurray!, You have an order to process.",
                    f"Get the plants ready for {customer.get('name') or customer_email}",
                )
            )
        return emails

    def dispatch(self, payload: Dict[str, object]) -> Future:
        future = self.executor.submit(self.send_email, payload)
        recipients = ", ".join(payload.get("to") or [])

        def log_outcome(done: Future):
            exc = done.exception()
            if exc is not None:
                logger.warning("Order email to %s failed: %s", recipients, exc)
                return
            sent, error = done.result()
            if sent:
                logger.info("Order email sent to %s", recipients)
            else:
                logger.warning("Order email to %s failed: %s", recipients, error)

        future.add_done_callback(log_outcome)
        return future

    def notify_order_placed(self, order: Dict[str, object], order_id) -> List[Future]:
        return [self.dispatch(email) for email in self.build_order_emails(order, order_id)]

    def shutdown(self):
        self.executor.shutdown(wait=True)
