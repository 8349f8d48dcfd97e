from tortoise import BaseDBAsyncClient

RUN_IN_TRANSACTION = True


async def upgrade(db: BaseDBAsyncClient) -> str:  # noqa: ARG001
    return """
        ALTER TABLE "tg_users" ADD "message_status_id" SMALLINT NOT NULL DEFAULT 0;
        COMMENT ON COLUMN "tg_users"."message_status_id" IS 'Количество отправленных отложенных сообщений';"""


async def downgrade(db: BaseDBAsyncClient) -> str:  # noqa: ARG001
    return """
        ALTER TABLE "tg_users" DROP COLUMN "message_status_id";"""
