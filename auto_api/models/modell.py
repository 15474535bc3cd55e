from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from auto_api.database import Base


class Modell(Base):
    __tablename__ = "modell"

    id     = Column(Integer, primary_key=True, index=True)
    modell = Column(String(40), nullable=False)
    autoId = Column("auto_id", Integer, ForeignKey("auto.id", ondelete="CASCADE"),
                    unique=True, nullable=False)

    auto = relationship("Auto", back_populates="modell")

    def __repr__(self):
        return f"<Modell id={self.id} modell={self.modell}>"
