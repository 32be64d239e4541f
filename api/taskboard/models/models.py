from sqlalchemy import Column, Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from taskboard.core.database import Base


class User(Base):
    __tablename__ = "users"
    user_id = Column(Integer, primary_key=True)
    username = Column(String(255), unique=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash
    tasks = relationship("Task", back_populates="user")


class Board(Base):
    __tablename__ = "boards"
    board_id = Column(Integer, primary_key=True)
    board_name = Column(String(255), nullable=False)
    columns = relationship("BoardColumn", back_populates="board")


class BoardColumn(Base):
    __tablename__ = "columns"
    column_id = Column(Integer, primary_key=True)
    board_id = Column(Integer, ForeignKey("boards.board_id"), nullable=False, index=True)
    column_name = Column(String(255), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    board = relationship("Board", back_populates="columns")
    tasks = relationship("Task", back_populates="column")


class Task(Base):
    __tablename__ = "tasks"
    task_id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.user_id"), nullable=False)
    column_id = Column(Integer, ForeignKey("columns.column_id"), nullable=False, index=True)
    task_title = Column(String(255), nullable=False)
    description = Column(Text)
    priority = Column(String(32))
    due_date = Column(Date)
    user = relationship("User", back_populates="tasks")
    column = relationship("BoardColumn", back_populates="tasks")
