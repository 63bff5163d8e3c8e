# le_dashboard/models/client.py

from datetime import datetime
from .base import db

CLIENT_STATUSES = ('pending', 'approved', 'rejected')

class Client(db.Model):
    __tablename__ = 'clients'

    id = db.Column(db.Integer, primary_key=True)

    # Company details
    company_name = db.Column(db.String(200), nullable=False)
    trading_name = db.Column(db.String(200))
    company_reg_no = db.Column(db.String(50))
    company_vat_no = db.Column(db.String(50))
    parent_company = db.Column(db.String(200))
    years_trading = db.Column(db.Integer)
    business_type = db.Column(db.String(50), nullable=False, default='Limited Company')

    # Addresses
    invoice_address = db.Column(db.Text)
    delivery_address = db.Column(db.Text)

    # Contact details
    telephone = db.Column(db.String(20))
    delivery_telephone = db.Column(db.String(20))
    email = db.Column(db.String(150))
    delivery_email = db.Column(db.String(150))
    nature_of_business = db.Column(db.Text)
    number_of_employees = db.Column(db.Integer)

    # Key contacts
    director_name = db.Column(db.String(100))
    p_ledger_name = db.Column(db.String(100))
    p_ledger_tel = db.Column(db.String(20))
    p_ledger_email = db.Column(db.String(150))

    # Trade references
    trade_ref1_name = db.Column(db.String(200))
    trade_ref1_phone = db.Column(db.String(20))
    trade_ref1_website = db.Column(db.String(200))
    trade_ref2_name = db.Column(db.String(200))
    trade_ref2_phone = db.Column(db.String(20))
    trade_ref2_website = db.Column(db.String(200))

    # Bank and credit application
    credit_application_amount = db.Column(db.Numeric(10, 2))
    bank_name = db.Column(db.String(100))
    bank_sort_code = db.Column(db.String(10))
    bank_post_code = db.Column(db.String(20))
    bank_account_no = db.Column(db.String(20))

    electronic_invoices = db.Column(db.Boolean, default=False)

    # Internal
    active = db.Column(db.Boolean, default=True)
    status = db.Column(db.String(20), default='pending')
    approved_at = db.Column(db.DateTime)
    rejected_at = db.Column(db.DateTime)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    jobs = db.relationship('Job', backref='client', lazy='dynamic')

    # API field name -> column attribute, shared by the storage layer when
    # reading request bodies.
    FIELD_MAP = {
        'companyName': 'company_name',
        'tradingName': 'trading_name',
        'companyRegNo': 'company_reg_no',
        'companyVatNo': 'company_vat_no',
        'parentCompany': 'parent_company',
        'yearsTrading': 'years_trading',
        'businessType': 'business_type',
        'invoiceAddress': 'invoice_address',
        'deliveryAddress': 'delivery_address',
        'telephone': 'telephone',
        'deliveryTelephone': 'delivery_telephone',
        'email': 'email',
        'deliveryEmail': 'delivery_email',
        'natureOfBusiness': 'nature_of_business',
        'numberOfEmployees': 'number_of_employees',
        'directorName': 'director_name',
        'pLedgerName': 'p_ledger_name',
        'pLedgerTel': 'p_ledger_tel',
        'pLedgerEmail': 'p_ledger_email',
        'tradeRef1Name': 'trade_ref1_name',
        'tradeRef1Phone': 'trade_ref1_phone',
        'tradeRef1Website': 'trade_ref1_website',
        'tradeRef2Name': 'trade_ref2_name',
        'tradeRef2Phone': 'trade_ref2_phone',
        'tradeRef2Website': 'trade_ref2_website',
        'creditApplicationAmount': 'credit_application_amount',
        'bankName': 'bank_name',
        'bankSortCode': 'bank_sort_code',
        'bankPostCode': 'bank_post_code',
        'bankAccountNo': 'bank_account_no',
        'electronicInvoices': 'electronic_invoices',
        'active': 'active',
        'status': 'status',
        'notes': 'notes',
    }

    def to_dict(self):
        """Serializes the Client using the API's camelCase field names."""
        data = {'id': self.id}
        for api_name, attr in self.FIELD_MAP.items():
            data[api_name] = getattr(self, attr)
        if self.credit_application_amount is not None:
            data['creditApplicationAmount'] = f"{self.credit_application_amount:.2f}"
        data['approvedAt'] = self.approved_at.isoformat() if self.approved_at else None
        data['rejectedAt'] = self.rejected_at.isoformat() if self.rejected_at else None
        data['createdAt'] = self.created_at.isoformat() if self.created_at else None
        data['updatedAt'] = self.updated_at.isoformat() if self.updated_at else None
        return data

    def __repr__(self):
        return f'<Client id={self.id} company={self.company_name} status={self.status}>'
