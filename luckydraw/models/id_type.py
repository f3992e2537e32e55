from sqlalchemy import BigInteger, Integer

# Surrogate keys and assigned numbers: 64-bit on server databases. SQLite only
# autoincrements a primary key declared exactly INTEGER.
ID_TYPE = BigInteger().with_variant(Integer, "sqlite")
