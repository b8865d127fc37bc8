from sqlalchemy.orm import declarative_base

# セッションテーブルのみを管理するため、TimeStampMixin等の共通カラムは持たない
Base = declarative_base()
