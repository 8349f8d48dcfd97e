from tortoise import BaseDBAsyncClient

RUN_IN_TRANSACTION = True


async def upgrade(_db: BaseDBAsyncClient) -> str:
    return """
        CREATE TABLE IF NOT EXISTS "tg_users" (
    "id" BIGINT NOT NULL PRIMARY KEY,
    "alias" VARCHAR(32),
    "created_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
    "updated_at" TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
);
COMMENT ON COLUMN "tg_users"."id" IS 'Telegram User ID';
COMMENT ON COLUMN "tg_users"."alias" IS '@username в Telegram';
COMMENT ON COLUMN "tg_users"."created_at" IS 'Первое обращение';
COMMENT ON COLUMN "tg_users"."updated_at" IS 'Последнее обращение';
COMMENT ON TABLE "tg_users" IS 'Пользователь бота (все, кто хоть раз писал).';
CREATE TABLE IF NOT EXISTS "aerich" (
    "id" SERIAL NOT NULL PRIMARY KEY,
    "version" VARCHAR(255) NOT NULL,
    "app" VARCHAR(100) NOT NULL,
    "content" JSONB NOT NULL
);"""


async def downgrade(_db: BaseDBAsyncClient) -> str:
    return """
        DROP TABLE IF EXISTS "tg_users";"""
