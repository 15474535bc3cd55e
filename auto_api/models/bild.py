from sqlalchemy import Column, Integer, String, ForeignKey
from sqlalchemy.orm import relationship
from auto_api.database import Base


class Bild(Base):
    __tablename__ = "bild"

    id           = Column(Integer, primary_key=True, index=True)
    beschriftung = Column(String(32), nullable=False)
    contentType  = Column("content_type", String(16), nullable=False)
    autoId       = Column("auto_id", Integer, ForeignKey("auto.id", ondelete="CASCADE"),
                          nullable=False, index=True)

    auto = relationship("Auto", back_populates="bilder")

    def __repr__(self):
        return f"<Bild id={self.id} beschriftung={self.beschriftung}>"
