"""Operations package."""
