import logging
from celery import shared_task
from django.utils import timezone

logger = logging.getLogger(__name__)

# 少于这个长度的 LLM 输出视为生成失败
MIN_CARE_PLAN_LENGTH = 100


class CarePlanGenerationError(Exception):
    pass


@shared_task(
    bind=True,
    max_retries=3,
    default_retry_delay=10,   # 初始重试延迟（秒），指数退避会乘以 2^retry_count
    acks_late=True,           # 任务执行完才 ack，防止 worker 崩溃时任务丢失
    reject_on_worker_lost=True,
)
def generate_care_plan(self, order_id: str):
    """
    异步生成 Care Plan。

    pending → processing → completed / failed
    重试：最多 3 次，10s → 20s → 40s；耗尽后把 order 标记为 failed。
    """
    from intake.llm.factory import get_llm_service
    from intake.llm.prompts import PROMPT_VERSION, SYSTEM_PROMPT, build_care_plan_prompt
    from intake.models import CarePlan, Order

    logger.info("[generate_care_plan] order_id=%s attempt %d/%d",
                order_id, self.request.retries + 1, self.max_retries + 1)

    try:
        order = Order.objects.select_related('patient', 'provider').get(id=order_id)
    except Order.DoesNotExist:
        logger.error("[generate_care_plan] order %s does not exist, skipping", order_id)
        return

    order.status = 'processing'
    order.save(update_fields=['status', 'updated_at'])

    try:
        prompt = build_care_plan_prompt(order)
        response = get_llm_service().complete(SYSTEM_PROMPT, prompt)

        if len(response.content.strip()) < MIN_CARE_PLAN_LENGTH:
            raise CarePlanGenerationError(
                f"LLM response too short ({len(response.content.strip())} chars)"
            )

        logger.info("[generate_care_plan] order_id=%s model=%s tokens in=%d out=%d",
                    order_id, response.model, response.input_tokens, response.output_tokens)

        # OneToOne：重试时先删掉上一次的结果
        CarePlan.objects.filter(order=order).delete()
        CarePlan.objects.create(
            order=order,
            content=response.content,
            llm_model=response.model,
            llm_prompt_version=PROMPT_VERSION,
        )

        order.status = 'completed'
        order.completed_at = timezone.now()
        order.error_message = None
        order.save(update_fields=['status', 'completed_at', 'error_message', 'updated_at'])

        logger.info("[generate_care_plan] order_id=%s completed", order_id)

    except Exception as exc:
        logger.warning("[generate_care_plan] order_id=%s failed (attempt %d): %s",
                       order_id, self.request.retries + 1, exc)

        if self.request.retries < self.max_retries:
            countdown = self.default_retry_delay * (2 ** self.request.retries)
            logger.info("[generate_care_plan] retrying in %ds", countdown)
            order.status = 'pending'
            order.save(update_fields=['status', 'updated_at'])
            raise self.retry(exc=exc, countdown=countdown)

        logger.error("[generate_care_plan] order_id=%s exhausted retries, marking failed", order_id)
        order.status = 'failed'
        order.error_message = f"Failed after {self.max_retries} retries: {exc}"
        order.save(update_fields=['status', 'error_message', 'updated_at'])
