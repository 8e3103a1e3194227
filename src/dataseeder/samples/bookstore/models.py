"""
Bookstore domain models used by the sample seeders
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import Column, Date, ForeignKey, Numeric, String, Table, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


book_categories = Table(
    "book_categories",
    Base.metadata,
    Column("book_id", ForeignKey("books.id"), primary_key=True),
    Column("category_id", ForeignKey("categories.id"), primary_key=True),
)


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(50))
    description: Mapped[Optional[str]] = mapped_column(String(200))

    books: Mapped[List["Book"]] = relationship(
        secondary=book_categories, back_populates="categories"
    )


class Author(Base):
    __tablename__ = "authors"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(100))
    biography: Mapped[Optional[str]] = mapped_column(Text)
    date_of_birth: Mapped[date] = mapped_column(Date)

    books: Mapped[List["Book"]] = relationship(back_populates="author")


class Book(Base):
    __tablename__ = "books"

    id: Mapped[int] = mapped_column(primary_key=True)
    title: Mapped[str] = mapped_column(String(200))
    author_id: Mapped[int] = mapped_column(ForeignKey("authors.id"))
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2))
    published_date: Mapped[date] = mapped_column(Date)
    description: Mapped[Optional[str]] = mapped_column(String(500))

    author: Mapped[Author] = relationship(back_populates="books")
    categories: Mapped[List[Category]] = relationship(
        secondary=book_categories, back_populates="books"
    )
