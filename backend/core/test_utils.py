"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.projects.models import Project, FundTransfer, ProjectFundTransfer
from backend.workers.models import Worker, WorkerAttendance, WorkerTransfer, WorkerMiscExpense
from backend.parties.models import Supplier, SupplierPayment
from backend.purchasing.models import Material, MaterialPurchase, TransportationExpense
from backend.equipment.models import Equipment
from decimal import Decimal
from django.utils import timezone
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False, groups=None, **kwargs):
        """Create a test user, optionally in the named groups"""
        from django.contrib.auth.models import Group
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        user = User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser,
            **kwargs
        )
        for name in groups or []:
            group, _ = Group.objects.get_or_create(name=name)
            user.groups.add(group)
        return user

    @staticmethod
    def create_project(name=None, status='active', user=None, **kwargs):
        """Create a test project"""
        if not name:
            name = f'Project_{TestDataFactory.random_string(6)}'
        return Project.objects.create(name=name, status=status, created_by=user, **kwargs)

    @staticmethod
    def create_fund_transfer(project, amount=None, transfer_date=None, **kwargs):
        return FundTransfer.objects.create(
            project=project,
            amount=amount if amount is not None else Decimal('1000.00'),
            sender_name=kwargs.pop('sender_name', 'Head office'),
            transfer_date=transfer_date or timezone.now().date(),
            **kwargs
        )

    @staticmethod
    def create_project_transfer(from_project, to_project, amount=None, transfer_date=None):
        return ProjectFundTransfer.objects.create(
            from_project=from_project,
            to_project=to_project,
            amount=amount if amount is not None else Decimal('100.00'),
            transfer_date=transfer_date or timezone.now().date(),
        )

    @staticmethod
    def create_worker(name=None, type='عامل', daily_wage=None, is_active=True):
        """Create a test worker"""
        if not name:
            name = f'Worker_{TestDataFactory.random_string(6)}'
        return Worker.objects.create(
            name=name,
            type=type,
            daily_wage=daily_wage if daily_wage is not None else Decimal('50.00'),
            phone='0599000000',
            is_active=is_active
        )

    @staticmethod
    def create_attendance(worker, project, date=None, payment_type='full', paid_amount=None,
                          work_days=None, daily_wage=None, is_present=True):
        """Create an attendance day (wages computed by the model)"""
        return WorkerAttendance.objects.create(
            worker=worker,
            project=project,
            date=date or timezone.now().date(),
            is_present=is_present,
            work_days=work_days if work_days is not None else Decimal('1.00'),
            daily_wage=daily_wage if daily_wage is not None else worker.daily_wage,
            paid_amount=paid_amount if paid_amount is not None else Decimal('0.00'),
            payment_type=payment_type,
        )

    @staticmethod
    def create_worker_transfer(worker, project, amount=None, transfer_date=None):
        return WorkerTransfer.objects.create(
            worker=worker,
            project=project,
            amount=amount if amount is not None else Decimal('20.00'),
            recipient_name=worker.name,
            transfer_method='cash',
            transfer_date=transfer_date or timezone.now().date(),
        )

    @staticmethod
    def create_misc_expense(project, amount=None, date=None, description='نثريات'):
        return WorkerMiscExpense.objects.create(
            project=project,
            amount=amount if amount is not None else Decimal('10.00'),
            description=description,
            date=date or timezone.now().date(),
        )

    @staticmethod
    def create_supplier(name=None, phone=None):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        return Supplier.objects.create(
            name=name,
            phone=phone or f'{random.randint(1000000000, 9999999999)}',
            contact_person='Test Contact'
        )

    @staticmethod
    def create_supplier_payment(supplier, amount=None, payment_date=None, project=None):
        return SupplierPayment.objects.create(
            supplier=supplier,
            project=project,
            amount=amount if amount is not None else Decimal('100.00'),
            payment_date=payment_date or timezone.now().date(),
        )

    @staticmethod
    def create_material(name=None, unit='طن', category='مواد بناء'):
        if not name:
            name = f'Material_{TestDataFactory.random_string(6)}'
        return Material.objects.create(name=name, unit=unit, category=category)

    @staticmethod
    def create_material_purchase(project, material=None, supplier=None, quantity=None, unit_price=None,
                                 purchase_type='cash', purchase_date=None, supplier_name=''):
        """Create a material purchase; total = quantity x unit price"""
        return MaterialPurchase.objects.create(
            project=project,
            material=material or TestDataFactory.create_material(),
            supplier=supplier,
            supplier_name=supplier_name,
            quantity=quantity if quantity is not None else Decimal('2.000'),
            unit_price=unit_price if unit_price is not None else Decimal('100.00'),
            purchase_type=purchase_type,
            purchase_date=purchase_date or timezone.now().date(),
        )

    @staticmethod
    def create_transportation(project, amount=None, date=None, worker=None):
        return TransportationExpense.objects.create(
            project=project,
            worker=worker,
            amount=amount if amount is not None else Decimal('30.00'),
            description='نقل مواد',
            date=date or timezone.now().date(),
        )

    @staticmethod
    def create_equipment(name=None, status='available', condition='good', purchase_price=None,
                         purchase_date=None, current_project=None, **kwargs):
        """Create a tool; the code is assigned on save"""
        if not name:
            name = f'Tool_{TestDataFactory.random_string(6)}'
        return Equipment.objects.create(
            name=name,
            category=kwargs.pop('category', 'أدوات'),
            status=status,
            condition=condition,
            purchase_price=purchase_price if purchase_price is not None else Decimal('1000.00'),
            purchase_date=purchase_date,
            current_project=current_project,
            **kwargs
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
