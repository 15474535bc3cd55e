from sqlalchemy import Column, Integer, String, LargeBinary, ForeignKey
from sqlalchemy.orm import relationship
from auto_api.database import Base


class AutoFile(Base):
    __tablename__ = "auto_file"

    id       = Column(Integer, primary_key=True, index=True)
    filename = Column(String(255), nullable=False)
    mimetype = Column(String(100), nullable=False)
    data     = Column(LargeBinary, nullable=False)
    autoId   = Column("auto_id", Integer, ForeignKey("auto.id", ondelete="CASCADE"),
                      unique=True, nullable=False)

    auto = relationship("Auto", back_populates="file")

    def __repr__(self):
        return f"<AutoFile id={self.id} filename={self.filename} mimetype={self.mimetype}>"
