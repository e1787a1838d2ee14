# =============================================================================
# core/services/billing_service.py - Stripe Billing
# =============================================================================
# Checkout sessions, the customer portal, webhook-driven plan changes and the
# admin revenue card.
#
# profiles.plan is only ever changed by webhook events (or an admin), never
# by the checkout redirect, so a cancelled or failed payment can't upgrade.
# =============================================================================

import logging
from typing import Any

import stripe

from app.auth.models import AuthUser
from app.config import settings
from app.exceptions import BadRequestError, ConfigurationError, NotFoundError, PaymentError
from core.models.billing import BillingPlan, Currency, PlanPrice, PricingResponse, RevenueSummary
from core.models.profile import Plan
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)

DEFAULT_CURRENCY = Currency.EUR

# Subscription statuses that keep paid access
ACTIVE_STATUSES = {"trialing", "active", "past_due"}

_CURRENCY_ALIASES = {
    "usd": Currency.USD, "us": Currency.USD,
    "gbp": Currency.GBP, "uk": Currency.GBP, "gb": Currency.GBP,
    "eur": Currency.EUR, "eu": Currency.EUR,
}


def normalize_currency(raw: str | None) -> Currency:
    """
    Map a currency or country hint to a supported currency.

    Examples:
        normalize_currency("USD")  # Currency.USD
        normalize_currency("uk")   # Currency.GBP
        normalize_currency("jpy")  # Currency.EUR (default)
    """
    value = (raw or "").strip().lower()
    if value in _CURRENCY_ALIASES:
        return _CURRENCY_ALIASES[value]
    for prefix in ("usd", "gbp", "eur"):
        if value.startswith(prefix):
            return _CURRENCY_ALIASES[prefix]
    return DEFAULT_CURRENCY


def parse_plan(raw: str | None) -> BillingPlan:
    """Unknown or missing plans fall back to monthly pro."""
    try:
        return BillingPlan((raw or "").strip().lower())
    except ValueError:
        return BillingPlan.PRO


def price_id_for(plan: BillingPlan, currency: Currency) -> str:
    """Configured Stripe price id, or "" when not set."""
    return getattr(settings, f"STRIPE_PRICE_{plan.value.upper()}_{currency.value.upper()}", "")


def stripe_field(obj: Any, key: str, default: Any = None) -> Any:
    """
    Read one field from a Stripe object or plain dict.

    StripeObject is not a dict (no .get()), and missing or null fields
    both come back as `default`.
    """
    if obj is None:
        return default
    try:
        value = obj[key]
    except KeyError:
        return default
    return default if value is None else value


class BillingService:
    """
    Service for Stripe operations.
    """

    @staticmethod
    def _configure() -> None:
        if not settings.stripe_enabled:
            raise ConfigurationError("Stripe is not configured on the server.", "STRIPE_SECRET_KEY")
        stripe.api_key = settings.STRIPE_SECRET_KEY

    # -------------------------------------------------------------------------
    # Checkout & Portal
    # -------------------------------------------------------------------------

    @staticmethod
    def pricing(currency_hint: str | None) -> PricingResponse:
        """Which plans can be bought in the (normalized) currency."""
        currency = normalize_currency(currency_hint)
        return PricingResponse(
            currency=currency,
            plans=[PlanPrice(plan=plan, available=bool(price_id_for(plan, currency))) for plan in BillingPlan],
        )

    @staticmethod
    def create_checkout(user: AuthUser, plan: str | None, currency: str) -> str:
        """
        Create a subscription Checkout session.

        Returns:
            The hosted checkout URL

        Raises:
            BadRequestError: Unsupported currency
            ConfigurationError: Stripe or the price id isn't configured
            PaymentError: Stripe rejected the request
        """
        try:
            currency_value = Currency((currency or "").strip().lower())
        except ValueError:
            raise BadRequestError(
                f"Unsupported currency: {currency}",
                suggestion="Use one of: eur, usd, gbp",
            )
        plan_value = parse_plan(plan)

        BillingService._configure()
        price_id = price_id_for(plan_value, currency_value)
        if not price_id:
            raise ConfigurationError(
                f"No Stripe price configured for {plan_value.value}/{currency_value.value}",
                f"STRIPE_PRICE_{plan_value.value.upper()}_{currency_value.value.upper()}",
            )

        try:
            session = stripe.checkout.Session.create(
                mode="subscription",
                line_items=[{"price": price_id, "quantity": 1}],
                customer_email=user.email,
                success_url=f"{settings.site_url}/dashboard?checkout=success",
                cancel_url=f"{settings.site_url}/dashboard?checkout=cancelled",
                metadata={
                    "userId": str(user.id),
                    "plan": plan_value.value,
                    "currency": currency_value.value,
                },
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout failed for {user.id}: {e}")
            raise PaymentError("Could not start checkout", error=str(e))

        logger.info(f"Checkout session {session.id} created for {user.id} ({plan_value.value}/{currency_value.value})")
        return session.url

    @staticmethod
    def create_portal(user: AuthUser) -> str:
        """
        Create a Billing Portal session for the user's Stripe customer.

        Raises:
            NotFoundError: The user has never checked out
        """
        BillingService._configure()
        profile = SupabaseClient.fetch_profile(user.id, columns="stripe_customer_id") or {}
        customer_id = profile.get("stripe_customer_id")
        if not customer_id:
            raise NotFoundError("Stripe customer")

        params: dict[str, Any] = {
            "customer": customer_id,
            "return_url": f"{settings.site_url}/settings",
        }
        if settings.STRIPE_PORTAL_CONFIGURATION_ID:
            params["configuration"] = settings.STRIPE_PORTAL_CONFIGURATION_ID

        try:
            session = stripe.billing_portal.Session.create(**params)
        except stripe.StripeError as e:
            logger.error(f"Stripe portal failed for {user.id}: {e}")
            raise PaymentError("Could not open the billing portal", error=str(e))
        return session.url

    # -------------------------------------------------------------------------
    # Webhooks
    # -------------------------------------------------------------------------

    @staticmethod
    def construct_event(payload: bytes, signature: str | None) -> Any:
        """
        Verify and parse a webhook payload.

        Raises:
            BadRequestError: Missing signature/secret or signature mismatch
        """
        if not signature or not settings.STRIPE_WEBHOOK_SECRET:
            raise BadRequestError("Missing Stripe signature or webhook secret")
        try:
            return stripe.Webhook.construct_event(payload, signature, settings.STRIPE_WEBHOOK_SECRET)
        except stripe.SignatureVerificationError as e:
            logger.warning(f"Stripe webhook signature check failed: {e}")
            raise BadRequestError("Invalid Stripe signature")
        except ValueError as e:
            raise BadRequestError(f"Invalid webhook payload: {e}")

    @staticmethod
    def handle_event(event: Any) -> None:
        """
        Apply a verified Stripe event to profiles.

        Raises:
            PaymentError: If the profile update fails (Stripe will retry)
        """
        event_type = event["type"]
        obj = event["data"]["object"]
        logger.info(f"Stripe event {event_type}")

        try:
            if event_type == "checkout.session.completed":
                BillingService._on_checkout_completed(obj)
            elif event_type == "customer.subscription.updated":
                BillingService._on_subscription_updated(obj)
            elif event_type == "customer.subscription.deleted":
                BillingService._set_plan_by_customer(stripe_field(obj, "customer"), Plan.FREE)
            else:
                logger.debug(f"Ignoring Stripe event {event_type}")
        except SupabaseClientError as e:
            logger.error(f"Failed to apply Stripe event {event_type}: {e}")
            raise PaymentError("Failed to update subscription", error=str(e))

    @staticmethod
    def _on_checkout_completed(session: Any) -> None:
        customer_id = stripe_field(session, "customer")
        if not customer_id:
            logger.warning("checkout.session.completed without customer; skipping")
            return

        metadata = stripe_field(session, "metadata")
        plan = Plan.FOUNDER if stripe_field(metadata, "plan") == BillingPlan.FOUNDER.value else Plan.PRO
        updates = {"stripe_customer_id": customer_id, "plan": plan.value}

        user_id = stripe_field(metadata, "userId") or stripe_field(metadata, "user_id")
        if user_id:
            SupabaseClient.update_profile(user_id, updates)
            logger.info(f"User {user_id} upgraded to {plan.value}")
            return

        email = (
            stripe_field(session, "customer_email")
            or stripe_field(stripe_field(session, "customer_details"), "email")
        )
        if email:
            SupabaseClient.update_profiles_where("email", email, updates)
            logger.info(f"User {email} upgraded to {plan.value}")
        else:
            logger.warning(f"checkout.session.completed for {customer_id} has no user id or email")

    @staticmethod
    def _on_subscription_updated(subscription: Any) -> None:
        customer_id = stripe_field(subscription, "customer")
        if stripe_field(subscription, "status") in ACTIVE_STATUSES:
            current = BillingService._plan_for_customer(customer_id)
            # Founders stay founders while their subscription is active
            plan = Plan.FOUNDER if current is Plan.FOUNDER else Plan.PRO
        else:
            plan = Plan.FREE
        BillingService._set_plan_by_customer(customer_id, plan)

    @staticmethod
    def _plan_for_customer(customer_id: str | None) -> Plan | None:
        """
        Raises:
            SupabaseClientError: If the profile lookup fails
        """
        if not customer_id:
            return None
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table("profiles")
                .select("plan")
                .eq("stripe_customer_id", customer_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to look up profile by customer: {e}",
                code="FETCH_PROFILE_FAILED",
                details={"stripe_customer_id": customer_id},
            )
        rows = response.data or []
        return Plan.parse(rows[0].get("plan")) if rows else None

    @staticmethod
    def _set_plan_by_customer(customer_id: str | None, plan: Plan) -> None:
        if not customer_id:
            logger.warning(f"Subscription event without customer; cannot set plan {plan.value}")
            return
        SupabaseClient.update_profiles_where("stripe_customer_id", customer_id, {"plan": plan.value})
        logger.info(f"Customer {customer_id} set to {plan.value}")

    # -------------------------------------------------------------------------
    # Revenue
    # -------------------------------------------------------------------------

    @staticmethod
    def revenue() -> RevenueSummary:
        """
        Active subscriptions and MRR from Stripe.

        Returns zeros when Stripe isn't configured so the admin card renders.
        """
        if not settings.stripe_enabled:
            return RevenueSummary()
        stripe.api_key = settings.STRIPE_SECRET_KEY

        summary = RevenueSummary()
        try:
            subscriptions = stripe.Subscription.list(status="active", limit=100)
            for subscription in subscriptions.auto_paging_iter():
                summary.active_subscriptions += 1
                for item in stripe_field(stripe_field(subscription, "items"), "data", []):
                    price = stripe_field(item, "price")
                    amount = stripe_field(price, "unit_amount", 0) * stripe_field(item, "quantity", 1) / 100
                    if stripe_field(stripe_field(price, "recurring"), "interval") == "year":
                        amount /= 12
                    currency = stripe_field(price, "currency", DEFAULT_CURRENCY.value)
                    summary.mrr_by_currency[currency] = round(
                        summary.mrr_by_currency.get(currency, 0.0) + amount, 2
                    )
        except stripe.StripeError as e:
            logger.error(f"Failed to load Stripe revenue: {e}")
            raise PaymentError("Could not load revenue from Stripe", error=str(e))
        return summary
