"""M_USER table definition.

Only the columns read during login are declared. The table itself is owned
and migrated by the back-office application.
"""

from sqlalchemy import (
    BigInteger,
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
)

metadata = MetaData()

m_user = Table(
    "M_USER",
    metadata,
    Column("M_USER_NO", BigInteger, primary_key=True, autoincrement=False),
    Column("USER_CODE", String(50), nullable=False, index=True),
    Column("USER_PASSWORD", String(100)),
    Column("USER_NAME", String(100)),
    Column("USE_FLAG", String(1)),
    Column("M_USITE_NO", BigInteger, nullable=False),
    Column("CONN_DUR", Numeric(10, 0)),
    Column("LOGIN_FAIL_CNT", Numeric(10, 0)),
    Column("AUTH_NUM", Integer),
    Column("PW_UPD_DATE", DateTime),
)

LOGIN_COLUMNS = (
    m_user.c.M_USER_NO,
    m_user.c.USER_CODE,
    m_user.c.USER_PASSWORD,
    m_user.c.USER_NAME,
    m_user.c.USE_FLAG,
    m_user.c.M_USITE_NO,
    m_user.c.CONN_DUR,
    m_user.c.LOGIN_FAIL_CNT,
    m_user.c.AUTH_NUM,
)
